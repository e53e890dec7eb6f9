"""
Command-line interface for mathoutline.

Provides commands for running the pipeline on an image and writing a
default configuration file.
"""

import argparse
import sys

from mathoutline.config import PRESETS, load_config, save_default_config
from mathoutline.models import CurveMode, OutlineOptions
from mathoutline.tracer import configure_tracer, get_tracer


def build_parser():
    parser = argparse.ArgumentParser(
        description="mathoutline: trace person outlines in an image as line, parabola and Bezier formulas",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Run command
    run_parser = subparsers.add_parser("run", help="Run the full pipeline on one image")
    run_parser.add_argument(
        "--input", "-i",
        required=True,
        help="Input image file",
    )
    run_parser.add_argument(
        "--out", "-o",
        required=True,
        help="Output directory",
    )
    run_parser.add_argument(
        "--mode", "-m",
        default=None,
        choices=[mode.value for mode in CurveMode],
        help="Curve representation (default from config: linear)",
    )
    run_parser.add_argument(
        "--threshold", "-t",
        type=int,
        default=None,
        help="Base edge threshold, 1-255 (default from config: 50)",
    )
    run_parser.add_argument(
        "--smoothing", "-s",
        type=float,
        default=None,
        help="Gaussian blur sigma, > 0 (default from config: 1.0)",
    )
    run_parser.add_argument(
        "--preset", "-p",
        default=None,
        choices=sorted(PRESETS),
        help="Named parameter preset",
    )
    run_parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to YAML configuration file",
    )
    run_parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Abort the run after this many seconds",
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug artifact generation",
    )
    run_parser.add_argument(
        "--trace",
        action="store_true",
        help="Enable runtime tracing",
    )
    run_parser.add_argument(
        "--trace-level",
        default="INFO",
        choices=["ERROR", "WARN", "INFO", "DEBUG"],
        help="Trace log level",
    )
    run_parser.add_argument(
        "--trace-file",
        default=None,
        help="Path to write trace logs",
    )
    run_parser.add_argument(
        "--trace-json",
        action="store_true",
        help="Enable JSON trace output",
    )

    # Init config command
    init_parser = subparsers.add_parser("init-config", help="Create default config file")
    init_parser.add_argument(
        "--out", "-o",
        default="mathoutline_config.yaml",
        help="Output path for config file",
    )
    init_parser.add_argument(
        "--preset", "-p",
        default="default",
        choices=sorted(PRESETS),
        help="Preset to write out",
    )

    return parser


def main(argv=None):
    """Main entry point for the CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    if args.command == "run":
        return handle_run(args)
    elif args.command == "init-config":
        return handle_init_config(args)

    return 0


def handle_run(args):
    """Handle the run command."""
    tracer = get_tracer()

    try:
        config = load_config(args.config, args.preset)

        # Command-line tracing flags win over the config file
        if args.trace:
            configure_tracer(
                enabled=True,
                level=args.trace_level,
                file_path=args.trace_file,
                json_output=args.trace_json,
            )
        else:
            configure_tracer(
                enabled=config.tracing.enabled,
                level=config.tracing.level,
                file_path=config.tracing.file_path,
                json_output=config.tracing.json_output,
            )

        options = OutlineOptions(
            edge_threshold=config.edges.threshold if args.threshold is None else args.threshold,
            smoothing=config.edges.smoothing if args.smoothing is None else args.smoothing,
            curve_mode=config.curves.mode if args.mode is None else args.mode,
        )

        from mathoutline.pipeline import run_pipeline

        with tracer.span("cli_run", module="cli"):
            result = run_pipeline(
                input_path=args.input,
                out_dir=args.out,
                options=options,
                config=config,
                debug=args.debug,
                deadline=args.timeout,
            )

        print("\nPipeline completed successfully.")
        print(f"  Image: {result.width}x{result.height} (preset: {result.preset})")
        print(f"  Contours traced: {result.contour_count}")
        print(f"  Person candidates: {len(result.candidates)}")
        if any(c.fallback for c in result.candidates):
            print("  [!] No contour cleared the confidence floor; using the largest contour")
        print(f"  Outlines: {len(result.outlines)} ({options.curve_mode.value})")
        print(f"\nOutputs saved to: {args.out}/")
        print("  - outlines.json")
        print("  - formulas.txt")
        print("  - edges.png")

        return 0

    except Exception as e:
        tracer.event(f"Pipeline failed: {str(e)}", level="ERROR")
        print(f"\nError: {str(e)}", file=sys.stderr)
        return 1

    finally:
        tracer.config.close()


def handle_init_config(args):
    """Handle the init-config command."""
    save_default_config(args.out, args.preset)
    print(f"Default configuration saved to: {args.out}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
