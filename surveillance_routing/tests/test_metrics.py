from src.metrics import HEADER, MetricsRecord, append_metrics
from src.simulation import SimulationResult


def test_metrics_header_written_once(tmp_path):
    out = tmp_path / "data.csv"
    result = SimulationResult(ticks=12, packets=4, intercepted=1, path_length=6)
    record = MetricsRecord.from_result(20, 0.25, result)
    assert append_metrics(out, record)
    assert append_metrics(out, record)
    lines = out.read_text(encoding="utf-8").splitlines()
    assert lines[0] == ",".join(HEADER)
    assert lines[1:] == ["20,4,0.25,12,6,1,75.0"] * 2


def test_metrics_failure_is_reported_not_raised(tmp_path):
    record = MetricsRecord(20, 4, 0.0, 9, 5, 4, 0.0)
    assert not append_metrics(tmp_path / "missing" / "data.csv", record)
