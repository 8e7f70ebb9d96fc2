import random


class PathTooShortError(ValueError):
    """Optimal path leaves no interior router to place the surveillance node on."""


def surveillance_candidates(path: list[int]) -> list[int]:
    # The first and last routers on the path are the only links to Start and End,
    # every packet must pass them, so they are never eligible
    return path[1:-1]


def choose_surveillance_node(path: list[int], rng: random.Random) -> int:
    candidates = surveillance_candidates(path)
    if not candidates:
        raise PathTooShortError(
            f"Optimal path {path} has {len(path)} interior router(s), need at least 3"
        )
    return candidates[rng.randrange(len(candidates))]
