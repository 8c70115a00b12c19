"""
Raster Bench Benchmarking Script

A simple interactive utility for running benchmarks.
This script uses the native Python interpreter, making it compatible
with your virtual environment without additional configuration.
"""

import sys
import subprocess

from raster_bench.config import PRESETS


def prompt_choice(question: str, count: int) -> int:
    """Ask until the user enters a number between 1 and count."""
    while True:
        selection = input(f"{question} (1-{count}): ")
        try:
            index = int(selection) - 1
        except ValueError:
            print("Please enter a valid number.")
            continue
        if 0 <= index < count:
            return index
        print(f"Invalid selection. Please enter a number between 1 and {count}.")


def run_benchmark():
    """Run the benchmark with user-selected options."""
    print("Raster Bench")
    print("============")
    print()

    presets = sorted(PRESETS)
    print("Select benchmark preset:")
    for i, name in enumerate(presets, 1):
        preset = PRESETS[name]
        print(f"{i}. {name.capitalize():<9} ({preset['size_count']} sizes - {preset['min_runs']} runs)")
    print(f"{len(presets) + 1}. Custom configuration")
    print()

    try:
        choice = prompt_choice("Enter selection", len(presets) + 1)
        if choice < len(presets):
            cmd_args = ["--preset", presets[choice]]
        else:
            cmd_args = []

            tests = input("\nEnter test filter (e.g., FillRectA,FillRectU or -FillWorld): ").strip()
            if tests:
                cmd_args.append(f"--tests={tests}")

            threads = input("\nEnter thread counts (default: 0,2,4,8): ").strip()
            if threads:
                cmd_args.extend(["--threads", threads])

            min_runs = input("\nEnter minimum runs per cell (default: 10): ").strip()
            if min_runs:
                cmd_args.extend(["--min-runs", min_runs])

        baseline = input("\nBaseline JSON to compare against (leave empty for none): ").strip()
        if baseline:
            cmd_args.extend(["--baseline", baseline])
    except KeyboardInterrupt:
        print("\nBenchmark cancelled.")
        return

    cmd = [sys.executable, "-m", "raster_bench.run", "--verbose"]
    cmd.extend(cmd_args)

    print("\nRunning benchmark...")
    print(f"Command: {' '.join(cmd)}\n")

    result = subprocess.run(cmd)
    if result.returncode == 0:
        print("\nBenchmark completed successfully!")
    else:
        print(f"\nBenchmark failed with exit code {result.returncode}")

    input("\nPress Enter to exit...")


if __name__ == "__main__":
    run_benchmark()
