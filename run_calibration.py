#!/usr/bin/env python3
"""
run_calibration.py — Run the feedback calibration benchmark.

Usage:
    python run_calibration.py                      # Full run
    python run_calibration.py --corpus-dir path/    # Custom corpus location
    python run_calibration.py --json                # Output JSON only (for CI)
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from calibration.benchmark import format_report, report_json, run_benchmark, save_report
from calibration.corpus_parser import parse_all_corpora


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="ReasonBridge Feedback Calibration Runner")
    parser.add_argument(
        "--corpus-dir",
        default="calibration/corpus",
        help="Path to corpus directory (default: calibration/corpus)",
    )
    parser.add_argument(
        "--output-dir",
        default="calibration/reports",
        help="Directory for output reports (default: calibration/reports)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output JSON only (for CI/automation)",
    )
    parser.add_argument(
        "--min-accuracy",
        type=float,
        default=0.8,
        help="Exit non-zero below this accuracy (default: 0.8)",
    )
    args = parser.parse_args(argv)

    corpus_dir = Path(args.corpus_dir)
    if not corpus_dir.exists():
        print(f"Error: Corpus directory not found: {corpus_dir}")
        return 1

    samples = parse_all_corpora(corpus_dir)
    if not samples:
        print(f"Error: No samples found in {corpus_dir}")
        return 1

    result = run_benchmark(corpus_dir=corpus_dir)
    report_path, json_path = save_report(result, args.output_dir)

    if args.json:
        print(json.dumps(report_json(result), indent=2))
    else:
        print(f"Loaded {len(samples)} samples from {corpus_dir}")
        print(format_report(result))
        print(f"\nReport saved to: {report_path}")
        print(f"JSON saved to:   {json_path}")

    if result.overall_accuracy < args.min_accuracy:
        if not args.json:
            print(f"\nAccuracy below {args.min_accuracy:.0%}: calibration failing")
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
