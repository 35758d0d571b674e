"""
Population & Activity Metrics
=============================

Model-agnostic statistics over lattice snapshots and tick records.

Functions:
- population: Number of live cells
- density: Live fraction of the lattice
- shell_core_density: Live fraction on the boundary shell vs the interior
- turnover: Births + deaths per evaluated cell
- summarize_run: Scalar summary of a sequence of tick records

Interpretation:
- Shell density below core density is the signature of the absorbing
  boundary (boundary cells have fewer effective neighbours)
- Turnover measures how "alive" the dynamics are independently of size

Usage:
    >>> rows = [engine.tick(t) for t in times]
    >>> df = pd.DataFrame(rows)
    >>> summary = summarize_run(df)
"""

import numpy as np
import pandas as pd
from typing import Dict, Tuple

from .geometry import shell_mask


def population(grid: np.ndarray) -> int:
    """Count live cells."""
    return int(np.count_nonzero(grid))


def density(grid: np.ndarray) -> float:
    """Live cells divided by N^3."""
    return population(grid) / float(grid.size)


def shell_core_density(grid: np.ndarray, depth: int = 1) -> Tuple[float, float]:
    """
    Live fraction on the outer shell and in the interior.

    Args:
        grid: Boolean (N, N, N) array
        depth: Shell thickness in cells

    Returns:
        (shell_density, core_density); core density is nan when the
        shell covers the whole lattice
    """
    shell = shell_mask(grid.shape[0], depth)
    core = ~shell
    shell_d = float(grid[shell].mean()) if shell.any() else float("nan")
    core_d = float(grid[core].mean()) if core.any() else float("nan")
    return shell_d, core_d


def turnover(births: np.ndarray, deaths: np.ndarray, evaluated: np.ndarray) -> np.ndarray:
    """
    State changes per evaluated cell for each tick.

    Ticks that evaluated nothing report 0.
    """
    births = np.asarray(births, dtype=float)
    deaths = np.asarray(deaths, dtype=float)
    evaluated = np.asarray(evaluated, dtype=float)
    out = np.zeros_like(evaluated)
    m = evaluated > 0
    out[m] = (births[m] + deaths[m]) / evaluated[m]
    return out


def summarize_run(df: pd.DataFrame) -> Dict[str, float]:
    """
    Scalar summary of a run's tick records.

    Expects the columns produced by Engine.tick:
    t, evaluated, births, deaths, population, protected, dirty, bias.
    """
    if len(df) == 0:
        return dict(
            ticks=0, mean_population=0.0, peak_population=0,
            final_population=0, dirty_fraction=0.0, mean_turnover=0.0,
            total_births=0, total_deaths=0
        )

    tv = turnover(df["births"].values, df["deaths"].values, df["evaluated"].values)
    return dict(
        ticks=int(len(df)),
        mean_population=float(df["population"].mean()),
        peak_population=int(df["population"].max()),
        final_population=int(df["population"].iloc[-1]),
        dirty_fraction=float(df["dirty"].astype(float).mean()),
        mean_turnover=float(tv.mean()),
        total_births=int(df["births"].sum()),
        total_deaths=int(df["deaths"].sum())
    )
