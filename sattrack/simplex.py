"""Starting simplex for downhill-simplex minimisation."""

from __future__ import annotations

from collections.abc import Sequence


def simplex(a: Sequence[float], da: Sequence[float]) -> list[list[float]]:
    """Build the n+1 vertices around parameters a with spreads da.

    Vertex i keeps a[j] for j > i, adds da[j] for j == i and subtracts
    da[j] for j < i.
    """
    if len(a) != len(da):
        raise ValueError("parameters and spreads must have the same length")
    return [
        [
            x if i < j else (x + d if i == j else x - d)
            for j, (x, d) in enumerate(zip(a, da))
        ]
        for i in range(len(a) + 1)
    ]