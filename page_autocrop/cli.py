"""Command-line interface for page analysis."""

import argparse
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def output_filename(input_path: str, prefix: str = "_") -> str:
    """Return the name the straightened image should be written to."""
    p = Path(input_path)
    return str(p.with_name(prefix + p.name))


def add_analyze_arguments(parser: argparse.ArgumentParser) -> None:
    """Add page analysis arguments to a parser."""
    parser.add_argument("input", help="Input image file")
    parser.add_argument("-o", "--output", help="Write the result to this file instead of stdout")
    parser.add_argument(
        "-d",
        "--threshold",
        type=float,
        help="Color value d/dx considered to be a page border (default: 12)",
    )
    parser.add_argument(
        "--fc",
        type=float,
        dest="cutoff_frequency",
        help="Cutoff frequency of the scan line denoise filter (default: 0.1)",
    )
    parser.add_argument(
        "-n",
        "--samples",
        type=int,
        dest="samples_per_side",
        help="Number of samples to take per side (default: 500)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        dest="max_workers",
        help="Number of worker threads (default: Python's thread pool default)",
    )
    parser.add_argument(
        "--config",
        help="JSON analysis configuration (inline JSON string or path to .json file). "
        "Explicit flags override its values.",
    )
    parser.add_argument(
        "--min-confidence",
        type=float,
        default=0.5,
        help="Warn when a side's r^2 is below this value (default: 0.5)",
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of warning when a side is below --min-confidence",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output the transform as JSON instead of a convert command line",
    )
    parser.add_argument(
        "--debug-dir",
        help="Directory to save debug visualization images",
    )


def parse_config(config_arg: str | None):
    """Parse analysis config from CLI argument.

    Args:
        config_arg: Either inline JSON string or path to .json file

    Returns:
        AnalysisConfig object (defaults if not provided)
    """
    from .models import AnalysisConfig

    if not config_arg:
        return AnalysisConfig()

    try:
        # Inline JSON can be longer than the OS allows for a file name
        if config_arg.lstrip().startswith("{"):
            return AnalysisConfig.from_json(config_arg)

        config_path = Path(config_arg)
        if config_path.suffix == ".json" and config_path.is_file():
            return AnalysisConfig.from_file(config_path)
        return AnalysisConfig.from_json(config_arg)
    except (OSError, ValueError) as e:
        raise ValueError(f"Invalid --config: {e}") from e


def build_config(args: argparse.Namespace):
    """Merge --config with explicit command line flags."""
    config = parse_config(args.config)
    for key in ("threshold", "cutoff_frequency", "samples_per_side", "max_workers"):
        value = getattr(args, key)
        if value is not None:
            setattr(config, key, value)
    config.validate()
    return config


def run_analyze(args: argparse.Namespace) -> None:
    """Analyze a page scan and print how to straighten it."""
    from .detection import analyze_config, load_image
    from .exceptions import AutocropError, LowConfidenceError

    try:
        config = build_config(args)
    except ValueError as e:
        sys.exit(str(e))

    visualizer = None
    if args.debug_dir:
        from .visualizer import DebugVisualizer

        visualizer = DebugVisualizer(args.debug_dir)

    try:
        img = load_image(args.input)
        transform = analyze_config(img, config, visualizer=visualizer)
        transform.validate()

        low = transform.low_confidence_sides(args.min_confidence)
        if low:
            names = [side.value for side in low]
            if args.strict:
                raise LowConfidenceError(names, args.min_confidence)
            logger.warning(
                f"Low confidence on {', '.join(names)} "
                f"(below {args.min_confidence}); manual intervention is advised"
            )
    except AutocropError as e:
        sys.exit(e.user_message)

    if args.json:
        output = json.dumps(transform.to_dict(), indent=2)
    else:
        output = f"convert {args.input} {transform} {output_filename(args.input)}"

    if args.output:
        with open(args.output, "w") as f:
            f.write(output + "\n")
    else:
        print(output)


def run_default_config(args: argparse.Namespace) -> None:
    """Print the default analysis configuration."""
    from .models import AnalysisConfig

    print(AnalysisConfig.default_json())


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Page scan straighten and crop analysis",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  page-autocrop analyze scan.png                  Print convert command line
  page-autocrop analyze scan.png --json -n 200    Output transform as JSON
  page-autocrop default-config > autocrop.json    Write default configuration
""",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command")

    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Analyze a page scan for rotation and crop",
    )
    add_analyze_arguments(analyze_parser)
    analyze_parser.set_defaults(func=run_analyze)

    config_parser = subparsers.add_parser(
        "default-config",
        help="Print the default configuration as JSON",
    )
    config_parser.set_defaults(func=run_default_config)

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()
