"""CLI entry point for astfuzz."""

import sys
import argparse
from pathlib import Path

from .config import RunConfig
from .fuzzer import FuzzDriver


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog='astfuzz',
        description='Grammar-based fuzzing with automatic test case minimization',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Fuzz until interrupted
  python -m astfuzz examples/py_compile.json

  # Stop after 500 test cases or the first finding
  python -m astfuzz examples/py_compile.json -n 500 --max-findings 1

  # Reproducible run, findings saved to a directory
  python -m astfuzz examples/py_compile.json --seed 42 -o findings/

  # Use printers defined in a Python file
  python -m astfuzz config.json -p examples/custom_printers.py
        """
    )

    parser.add_argument('config', type=Path,
                        help='Path to fuzzing configuration JSON file')
    parser.add_argument('-n', '--iterations', type=int, default=None,
                        help='Number of test cases to try (default: unlimited)')
    parser.add_argument('--max-findings', type=int, default=None,
                        help='Stop after this many findings')
    parser.add_argument('--seed', type=int, default=None,
                        help='Random seed for reproducibility')
    parser.add_argument('-o', '--output-dir', type=Path, default=None,
                        help='Also save each finding to this directory')
    parser.add_argument('-p', '--printers', type=Path, default=None,
                        help='Path to Python file with custom printer functions')
    parser.add_argument('--progress-interval', type=int, default=10,
                        help='Print the test count every N test cases (default: 10)')
    parser.add_argument('-q', '--quiet', action='store_true',
                        help='Suppress progress output')

    args = parser.parse_args(argv)

    # Validate arguments
    if not args.config.exists():
        print(f"ERROR: Configuration file not found: {args.config}")
        sys.exit(1)

    if args.printers is not None and not args.printers.exists():
        print(f"ERROR: Printers file not found: {args.printers}")
        sys.exit(1)

    if args.iterations is not None and args.iterations < 1:
        print("ERROR: Iterations must be at least 1")
        sys.exit(1)

    verbose = not args.quiet and sys.stdout.isatty()

    run_config = RunConfig(
        iterations=args.iterations,
        max_findings=args.max_findings,
        seed=args.seed,
        output_dir=args.output_dir,
        printers_file=args.printers,
        progress_interval=args.progress_interval,
        verbose=verbose,
    )

    driver = FuzzDriver(args.config, run_config)
    try:
        findings = driver.run()
    except KeyboardInterrupt:
        print(f"\nInterrupted after {driver.iterations} test cases, {driver.findings} findings")
        findings = driver.findings
    except Exception as e:
        print(f"\n✗ ERROR: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)

    sys.exit(1 if findings > 0 else 0)


if __name__ == '__main__':
    main()
