# File: connectvue/cli.py
"""
protoc-gen-connect-vue - Command-Line Interface
================================================

Standalone runner for environments without protoc: reads a descriptor
document (YAML / JSON) or a captured binary ``CodeGeneratorRequest`` and
writes the generated files to a directory.

Usage examples::

    # Basic generation
    python -m connectvue --descriptor tickets.yaml --output ./src/api

    # Replay a request captured from protoc
    connectvue -d request.bin -o ./src/api --clean -v

    # Render without writing
    connectvue -d tickets.yaml --dry-run

Exit codes:
    0 — success (including "no service found")
    2 — generation (render) error
    3 — export error
    4 — input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("connectvue")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_GENERATION_ERROR: int = 2
EXIT_EXPORT_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the ``connectvue`` logger.

    Args:
        verbosity: 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s",
        datefmt="%H:%M:%S",
    ))

    root_logger: logging.Logger = logging.getLogger("connectvue")
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    from connectvue import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="connectvue",
        description=(
            "Generate Vue Query bindings for a Connect service.\n\n"
            "Reads a descriptor document (YAML/JSON) or a binary "
            "CodeGeneratorRequest and writes client.ts, api.ts and index.ts."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s -d tickets.yaml -o ./src/api\n"
            "  %(prog)s -d request.bin -o ./src/api --clean\n"
            "  %(prog)s -d tickets.yaml --dry-run\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"protoc-gen-connect-vue v{__version__}",
    )

    parser.add_argument(
        "-d", "--descriptor",
        type=str,
        required=True,
        metavar="PATH",
        help="Descriptor document (.yaml/.yml/.json) or CodeGeneratorRequest (.bin/.pb).",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        metavar="DIR",
        help="Output directory. Required unless --dry-run is set.",
    )

    mode_group = parser.add_argument_group("operation modes")
    mode_group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Render everything but don't write files.",
    )
    mode_group.add_argument(
        "--clean",
        action="store_true",
        default=False,
        help="Clean the output directory before writing.",
    )
    mode_group.add_argument(
        "--no-manifest",
        action="store_true",
        default=False,
        help="Don't write manifest.json.",
    )

    config_group = parser.add_argument_group("configuration overrides")
    config_group.add_argument(
        "--output-root",
        type=str,
        default=None,
        metavar="PREFIX",
        help="Import prefix of generated message modules (default ./gen).",
    )
    config_group.add_argument(
        "--hook-prefix",
        type=str,
        default=None,
        metavar="PREFIX",
        help="Prefix of generated composables (default 'use').",
    )
    config_group.add_argument(
        "--template-dir",
        type=str,
        default=None,
        metavar="DIR",
        help="Directory with template overrides.",
    )
    config_group.add_argument(
        "--base-url",
        type=str,
        default=None,
        metavar="URL",
        help="Default transport base URL.",
    )

    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all output except the report.",
    )

    return parser


def _build_config_overrides(args: argparse.Namespace) -> Dict[str, object]:
    overrides: Dict[str, object] = {}
    if args.output_root is not None:
        overrides["output_root"] = args.output_root
    if args.hook_prefix is not None:
        overrides["hook_prefix"] = args.hook_prefix
    if args.template_dir is not None:
        overrides["template_dir"] = str(Path(args.template_dir).resolve())
    if args.base_url is not None:
        overrides["base_url"] = args.base_url
    return overrides


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(descriptor_path: Path, output_dir: Path, args: argparse.Namespace) -> int:
    from connectvue.generator import ConnectVueGenerator, GenerationReport

    generator: ConnectVueGenerator = ConnectVueGenerator(
        clean_output=args.clean,
        write_manifest=not args.no_manifest,
        dry_run=args.dry_run,
    )
    report: GenerationReport = generator.generate_from_file(
        descriptor_path=descriptor_path,
        output_dir=output_dir,
        config_overrides=_build_config_overrides(args) or None,
    )

    print(report.summary())

    if report.success:
        return EXIT_SUCCESS
    if report.load_errors:
        return EXIT_INPUT_ERROR
    if report.generation_errors:
        return EXIT_GENERATION_ERROR
    return EXIT_EXPORT_ERROR


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
        logging.disable(logging.CRITICAL)
    else:
        verbosity = args.verbose
    _setup_logging(verbosity)

    descriptor_path: Path = Path(args.descriptor).resolve()
    if not descriptor_path.is_file():
        logger.error("Descriptor file not found: %s", descriptor_path)
        sys.exit(EXIT_INPUT_ERROR)

    if args.output is None and not args.dry_run:
        logger.error("Output directory is required. Use -o/--output or --dry-run.")
        parser.print_usage(sys.stderr)
        sys.exit(EXIT_INPUT_ERROR)

    output_dir: Path = Path(args.output or ".").resolve()

    logger.info("Descriptor: %s", descriptor_path)
    logger.info("Output:     %s", output_dir)

    exit_code: int = _run_generation(descriptor_path, output_dir, args)
    if exit_code == EXIT_SUCCESS:
        logger.info("Generation completed successfully.")
    else:
        logger.error("Generation failed with exit code %d.", exit_code)
    sys.exit(exit_code)


__all__: List[str] = [
    "EXIT_EXPORT_ERROR",
    "EXIT_GENERATION_ERROR",
    "EXIT_INPUT_ERROR",
    "EXIT_SUCCESS",
    "cli_main",
]
