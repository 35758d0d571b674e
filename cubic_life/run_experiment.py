"""
cubic_life/run_experiment.py - Headless runner with a simulated clock
"""

import argparse
import os
import json
import logging
import numpy as np
import pandas as pd
from .config import PRESETS
from .engine import Engine
from .metrics import summarize_run, shell_core_density
from .plotters import plot_population_timeseries, plot_turnover

def tracked_point(t_ms: float, radius: float, period_ms: float) -> np.ndarray:
    """Synthetic tracked position: a circle in the z=0 plane around the lattice centre."""
    phase = 2.0 * np.pi * t_ms / period_ms
    return np.array([radius * np.cos(phase), radius * np.sin(phase), 0.0])

def build_config(args):
    """Preset configuration with command-line overrides applied."""
    config = PRESETS[args.preset]()
    config.size = args.size
    config.seed = args.seed
    if args.bias is not None:
        config.bias.INITIAL_BIAS = args.bias
    if args.protected is not None:
        config.windows.PROTECTED_WINDOW = args.protected
    if args.memory is not None:
        config.windows.MEMORY_WINDOW = args.memory
    return config

def run_experiment(args):
    """Drive the engine frame by frame and write metrics, figures and a summary."""
    os.makedirs(args.outdir, exist_ok=True)

    config = build_config(args)
    engine = Engine(config, now=0.0)

    print(f"[INFO] Running {args.preset}: N={config.size}, frames={args.frames}, "
          f"frame_ms={args.frame_ms}, bias={engine.bias.value:.2f}")

    rows = []
    inserted = 0
    for frame in range(args.frames):
        now = frame * args.frame_ms

        # Proximity insertion, once per polling pass
        if frame < args.insert_frames:
            p = tracked_point(now, args.orbit_radius, args.orbit_period)
            inserted += engine.insert_near(p, now)

        rec = engine.step(now)
        if rec is None:
            continue
        rec["frame"] = frame
        rows.append(rec)

        # Consumer side: re-read positions only when something changed
        if engine.dirty:
            rec["drawn"] = len(engine.live_cells())
            engine.clear_dirty()
        else:
            rec["drawn"] = rows[-2]["drawn"] if len(rows) > 1 else 0

        if args.bias_every > 0 and engine.tick_count % args.bias_every == 0:
            new_bias = engine.cycle_bias()
            print(f"[INFO] t={now:.0f}ms bias -> {new_bias:.2f}")

        if engine.tick_count % 25 == 0:
            print(f"[t={now/1000.0:6.2f}s] pop={rec['population']:5d}  "
                  f"births={rec['births']:4d}  deaths={rec['deaths']:4d}  "
                  f"protected={rec['protected']:4d}")

    # Save to DataFrame
    df = pd.DataFrame(rows)
    csv_path = os.path.join(args.outdir, "metrics.csv")
    df.to_csv(csv_path, index=False)

    summary = summarize_run(df)
    shell_d, core_d = shell_core_density(engine.snapshot())

    # Generate plots
    if not args.no_plots and len(df) > 0:
        plot_population_timeseries(df, os.path.join(args.outdir, "fig_population.png"))
        plot_turnover(df, os.path.join(args.outdir, "fig_turnover.png"))

    # Write summary
    summary_path = os.path.join(args.outdir, "summary.txt")
    with open(summary_path, "w") as f:
        f.write(f"=== Cubic Life {args.preset.upper()} Run ===\n")
        f.write(f"Configuration:\n")
        f.write(f"  Seed: {config.seed}\n")
        f.write(f"  Size: {config.size}\n")
        f.write(f"  Protected window: {config.windows.PROTECTED_WINDOW} ms\n")
        f.write(f"  Memory window: {config.windows.MEMORY_WINDOW} ms\n")
        f.write(f"  Initial bias: {config.bias.INITIAL_BIAS}\n")
        f.write(f"  Frames: {args.frames} x {args.frame_ms} ms\n")
        f.write(f"\nResults:\n")
        f.write(f"  Ticks: {summary['ticks']}\n")
        f.write(f"  Cells inserted: {inserted}\n")
        f.write(f"  Mean population: {summary['mean_population']:.1f}\n")
        f.write(f"  Peak population: {summary['peak_population']}\n")
        f.write(f"  Final population: {summary['final_population']}\n")
        f.write(f"  Dirty fraction: {summary['dirty_fraction']:.3f}\n")
        f.write(f"  Mean turnover: {summary['mean_turnover']:.4f}\n")
        f.write(f"  Shell / core density: {shell_d:.4f} / {core_d:.4f}\n")

    # Save metadata as JSON for easy parsing
    metadata = {
        "preset": args.preset,
        "seed": config.seed,
        "size": config.size,
        "frames": args.frames,
        "frame_ms": args.frame_ms,
        "insert_frames": args.insert_frames,
        "protected_window": config.windows.PROTECTED_WINDOW,
        "memory_window": config.windows.MEMORY_WINDOW,
        "initial_bias": config.bias.INITIAL_BIAS,
        "final_bias": engine.bias.value,
        "results": dict(
            summary,
            inserted=int(inserted),
            shell_density=shell_d,
            core_density=core_d
        )
    }

    json_path = os.path.join(args.outdir, "metadata.json")
    with open(json_path, "w") as f:
        json.dump(metadata, f, indent=2)

    print(f"[DONE] {args.preset} - outdir={args.outdir}")
    print(f"  Ticks={summary['ticks']}  inserted={inserted}")
    print(f"  Population mean={summary['mean_population']:.1f}  final={summary['final_population']}")
    print(f"  Shell/core density={shell_d:.4f}/{core_d:.4f}")

    return metadata

def parse_args(argv=None):
    p = argparse.ArgumentParser(
        description="Cubic Life - headless real-time automaton runner"
    )

    # Preset configurations
    p.add_argument("--preset", type=str, default="default",
                   choices=sorted(PRESETS),
                   help="Preset: default (500/1000 ms windows), brisk (500/700 ms)")

    # Output
    p.add_argument("--outdir", type=str, default="out",
                   help="Output directory for results")
    p.add_argument("--no_plots", action="store_true",
                   help="Skip figure generation")

    # Simulated clock
    p.add_argument("--frames", type=int, default=600,
                   help="Number of frames to simulate")
    p.add_argument("--frame_ms", type=float, default=16.7,
                   help="Frame duration (ms)")

    # Lattice
    p.add_argument("--size", type=int, default=30,
                   help="Lattice edge length N")
    p.add_argument("--seed", type=int, default=913,
                   help="Random seed for reproducibility")

    # Rule overrides
    p.add_argument("--bias", type=float, default=None,
                   help="Initial bias in [0, 1] (preset value if omitted)")
    p.add_argument("--bias_every", type=int, default=0,
                   help="Cycle the bias every K ticks (0 = never)")
    p.add_argument("--protected", type=float, default=None,
                   help="Protected window (ms)")
    p.add_argument("--memory", type=float, default=None,
                   help="Memory window (ms)")

    # Synthetic tracked point
    p.add_argument("--insert_frames", type=int, default=180,
                   help="Frames during which the tracked point inserts cells")
    p.add_argument("--orbit_radius", type=float, default=0.06,
                   help="Radius of the tracked point's circular path (world units)")
    p.add_argument("--orbit_period", type=float, default=2000.0,
                   help="Period of one revolution (ms)")

    p.add_argument("--verbose", action="store_true",
                   help="Enable debug logging of every tick")

    args = p.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    print(f"[CONFIG] Using preset {args.preset}")
    return args

def main(argv=None):
    """Main entry point"""
    args = parse_args(argv)
    run_experiment(args)

if __name__ == "__main__":
    main()
