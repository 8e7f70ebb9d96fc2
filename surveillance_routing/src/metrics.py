import csv
import logging
from dataclasses import dataclass, astuple
from pathlib import Path
from src.simulation import SimulationResult

logger = logging.getLogger("Metrics")

HEADER = [
    "network size",
    "packets sent",
    "randomness probability",
    "time for all packets to reach destination",
    "optimal path length",
    "packets copied by surveillance node",
    "security (%)",
]


@dataclass(frozen=True)
class MetricsRecord:
    network_size: int
    packets: int
    randomness: float
    ticks: int
    path_length: int
    intercepted: int
    security: float

    @classmethod
    def from_result(cls, network_size: int, randomness: float, result: SimulationResult) -> "MetricsRecord":
        return cls(
            network_size=network_size,
            packets=result.packets,
            randomness=randomness,
            ticks=result.ticks,
            path_length=result.path_length,
            intercepted=result.intercepted,
            security=result.security,
        )


def append_metrics(path: str | Path, record: MetricsRecord) -> bool:
    # One row per run, header only when the file is new
    path = Path(path)
    try:
        is_new = not path.exists()
        with path.open("a", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            if is_new:
                writer.writerow(HEADER)
            writer.writerow(astuple(record))
    except OSError as e:
        logger.error(f"couldn't append metrics to {path}: {e}")
        return False
    return True
