"""
Run the Hydrogen Acceptance Analysis Pipeline.

Executes the two analyses in order:
1. Geodemographic clustering and survey linkage (01_geodemographic_clustering.py)
2. Generalised ordered logit models (02_golm_analysis.py)

Usage:
    uv run python stats/run_all.py
"""

import subprocess
import sys
from datetime import datetime
from pathlib import Path

BASE_DIR = Path(__file__).parent.parent
STATS_DIR = BASE_DIR / "stats"

PIPELINE = [
    "01_geodemographic_clustering.py",
    "02_golm_analysis.py",
]


def run_script(script_name: str) -> bool:
    """Run a Python script and return success status."""
    script_path = STATS_DIR / script_name

    if not script_path.exists():
        print(f"  WARNING: Script not found: {script_name}")
        return False

    print(f"\n{'=' * 60}")
    print(f"RUNNING: {script_name}")
    print(f"{'=' * 60}")

    result = subprocess.run(
        [sys.executable, str(script_path)],
        cwd=str(BASE_DIR),
        capture_output=False,
        text=True,
    )
    return result.returncode == 0


def main() -> int:
    """Run the analysis pipeline."""
    print("=" * 60)
    print("HYDROGEN ACCEPTANCE ANALYSIS PIPELINE")
    print("=" * 60)
    print(f"Timestamp: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print(f"Base directory: {BASE_DIR}")

    results = {"success": [], "failed": []}
    for script in PIPELINE:
        key = "success" if run_script(script) else "failed"
        results[key].append(script)

    print("\n" + "=" * 60)
    print("PIPELINE COMPLETE")
    print("=" * 60)
    print(f"\nSuccessful: {len(results['success'])}")
    for s in results["success"]:
        print(f"  ✓ {s}")

    if results["failed"]:
        print(f"\nFailed: {len(results['failed'])}")
        for s in results["failed"]:
            print(f"  ✗ {s}")

    print("\n" + "=" * 60)
    print("OUTPUT LOCATIONS")
    print("=" * 60)
    print("  Cluster and model tables: temp/stats/results/")
    print("  Figures:                  stats/figures/")
    print("  Cluster map:              stats/figures/cluster_map_aberdeen.png")

    return 1 if results["failed"] else 0


if __name__ == "__main__":
    sys.exit(main())
