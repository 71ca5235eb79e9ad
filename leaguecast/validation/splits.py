# leaguecast/validation/splits.py

from typing import Any, List, Sequence, Tuple


def create_validation_split(
    matches: Sequence[Any],
    validation_fraction: float = 0.15,
) -> Tuple[List[Any], List[Any]]:
    """
    Split chronologically ordered matches into a training window and a
    held-out validation tail.

    Order is preserved on both sides of the boundary. With two or more
    matches, both windows are non-empty.
    """
    if not 0 < validation_fraction < 1:
        raise ValueError(
            f"validation_fraction must be between 0 and 1, got {validation_fraction}"
        )

    matches = list(matches)
    n_total = len(matches)
    if n_total < 2:
        return matches, []

    n_validation = int(n_total * validation_fraction)
    n_validation = min(max(n_validation, 1), n_total - 1)

    return matches[:-n_validation], matches[-n_validation:]
