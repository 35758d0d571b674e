import numpy as np
import pandas as pd
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from .metrics import turnover

def plot_population_timeseries(df: pd.DataFrame, outpath: str):
    plt.figure()
    plt.plot(df["t"].values / 1000.0, df["population"].values, label="alive")
    plt.plot(df["t"].values / 1000.0, df["protected"].values, label="protected", alpha=0.7)
    plt.xlabel("t [s]"); plt.ylabel("cells")
    plt.title("Population (alive vs insertion-protected)")
    plt.legend(); plt.tight_layout(); plt.savefig(outpath); plt.close()

def plot_turnover(df: pd.DataFrame, outpath: str):
    """
    Plot births/deaths per tick and the turnover ratio.

    Bias changes are marked with vertical lines so their effect on the
    following ticks is visible.
    """
    t = df["t"].values / 1000.0
    tv = turnover(df["births"].values, df["deaths"].values, df["evaluated"].values)

    fig, axes = plt.subplots(2, 1, figsize=(10, 6), sharex=True)

    axes[0].plot(t, df["births"].values, 'g-', alpha=0.7, label="births")
    axes[0].plot(t, df["deaths"].values, 'r-', alpha=0.7, label="deaths")
    axes[0].set_ylabel("cells / tick")
    axes[0].legend()
    axes[0].grid(True, alpha=0.3)

    axes[1].plot(t, tv, 'b-', alpha=0.7)
    axes[1].set_ylabel("turnover")
    axes[1].set_xlabel("t [s]")
    axes[1].grid(True, alpha=0.3)

    # Bias change markers
    bias = df["bias"].values
    for k in np.nonzero(np.diff(bias))[0]:
        for ax in axes:
            ax.axvline(t[k + 1], color='k', linestyle='--', alpha=0.3)

    plt.tight_layout()
    plt.savefig(outpath, dpi=150)
    plt.close()
