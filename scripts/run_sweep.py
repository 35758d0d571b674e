#!/usr/bin/env python3
"""
Sweep initial bias values to compare population dynamics
"""

import sys
import pathlib
import subprocess
import json

# Bias values to test
biases = [0.25, 0.5, 0.59, 0.75, 1.0]

results = []
for bias in biases:
    outdir = f"out_sweep/bias_{bias:.2f}"
    pathlib.Path(outdir).mkdir(exist_ok=True, parents=True)

    # Run experiment
    ret = subprocess.call([
        sys.executable, "-m", "cubic_life.run_experiment",
        "--preset", "default",
        "--outdir", outdir,
        "--frames", "900",
        "--bias", str(bias),
        "--seed", "913",
        "--no_plots"
    ])
    if ret != 0:
        print(f"Bias {bias:.2f}: run failed (exit {ret})")
        continue

    # Read results
    metadata_path = pathlib.Path(outdir) / "metadata.json"
    if metadata_path.exists():
        with open(metadata_path) as f:
            meta = json.load(f)
            results.append({
                "bias": bias,
                "mean_population": meta["results"]["mean_population"],
                "final_population": meta["results"]["final_population"],
                "mean_turnover": meta["results"]["mean_turnover"]
            })
            print(f"Bias {bias:.2f}: mean pop={meta['results']['mean_population']:.1f}, "
                  f"final={meta['results']['final_population']}")

# Summary
with open("out_sweep/summary.json", "w") as f:
    json.dump(results, f, indent=2)

print("\nSummary:")
pops = [r["mean_population"] for r in results]
if pops:
    print(f"  Mean population range: {min(pops):.1f} to {max(pops):.1f}")
