# File: featureforge/cli.py
"""
featureforge - Command-Line Interface
=======================================

Inspection and batch-resolution CLI built with the standard-library
``argparse`` module.

Usage examples::

    # What does Go / Chi support?
    python -m featureforge matrix -l go -f chi

    # What does a feature require, and what requires it?
    python -m featureforge deps mailService

    # Validate a saved project document
    python -m featureforge check project.yaml

    # Apply one mutation and write the result
    python -m featureforge resolve project.yaml --enable password_reset -o out.json
    python -m featureforge resolve project.json --language rust

    # Use a custom catalog
    python -m featureforge --catalog catalog.yaml matrix -l rust

Exit codes:
    0 - success
    1 - validation error
    2 - enable request rejected
    4 - input/argument error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

from featureforge.models import (
    FeatureKey,
    FeatureToggle,
    Framework,
    FrameworkChange,
    Language,
    LanguageChange,
    Mutation,
    ProjectDocument,
    ResolutionResult,
    Target,
)

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("featureforge")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_VALIDATION_ERROR: int = 1
EXIT_REJECTED: int = 2
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root featureforge logger based on verbosity level.

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

    fmt: str = "%(asctime)s │ %(levelname)-8s │ %(name)s │ %(message)s"
    datefmt: str = "%H:%M:%S"
    formatter: logging.Formatter = logging.Formatter(fmt, datefmt=datefmt)
    handler.setFormatter(formatter)

    root_logger: logging.Logger = logging.getLogger("featureforge")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from featureforge import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="featureforge",
        description=(
            "featureforge: feature compatibility and dependency resolution.\n\n"
            "Answers which project features a language/framework target "
            "supports and keeps feature sets consistent across changes."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s matrix -l go -f chi\n"
            "  %(prog)s deps mailService\n"
            "  %(prog)s check project.yaml\n"
            "  %(prog)s resolve project.yaml --enable passwordReset -o out.json\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"featureforge v{__version__}",
    )

    # --- Engine sources ---
    source_group = parser.add_argument_group("engine configuration")
    source_group.add_argument(
        "--catalog",
        type=str,
        default=None,
        metavar="PATH",
        help="Catalog file (JSON or YAML) replacing the built-in tables.",
    )
    source_group.add_argument(
        "--config",
        type=str,
        default=None,
        metavar="PATH",
        help="Engine config file (JSON or YAML).",
    )

    # --- Verbosity ---
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
        help="Suppress all output except errors.",
    )

    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    sub.required = True

    # --- matrix ---
    matrix_parser = sub.add_parser("matrix", help="Show supported features for a target.")
    matrix_parser.add_argument("-l", "--language", required=True, metavar="LANG")
    matrix_parser.add_argument(
        "-f", "--framework",
        default=None,
        metavar="FRAMEWORK",
        help="Defaults to the language's first framework.",
    )

    # --- deps ---
    deps_parser = sub.add_parser("deps", help="Show what a feature requires and what requires it.")
    deps_parser.add_argument("feature", metavar="FEATURE")

    # --- check ---
    check_parser = sub.add_parser("check", help="Validate a project document.")
    check_parser.add_argument("project", metavar="PROJECT")

    # --- resolve ---
    resolve_parser = sub.add_parser("resolve", help="Apply one change to a project document.")
    resolve_parser.add_argument("project", metavar="PROJECT")
    mutation_group = resolve_parser.add_mutually_exclusive_group()
    mutation_group.add_argument("--enable", metavar="FEATURE", default=None)
    mutation_group.add_argument("--disable", metavar="FEATURE", default=None)
    mutation_group.add_argument("--language", metavar="LANG", default=None)
    resolve_parser.add_argument(
        "--framework",
        metavar="FRAMEWORK",
        default=None,
        help="New framework; combine with --language or use alone.",
    )
    resolve_parser.add_argument(
        "-o", "--output",
        metavar="PATH",
        default=None,
        help="Write the resolved document here (JSON, or YAML by extension).",
    )

    return parser


# ---------------------------------------------------------------------------
# Engine construction
# ---------------------------------------------------------------------------


def _build_engine(args: argparse.Namespace):
    """Build the engine from ``--config`` / ``--catalog``."""
    from featureforge.config import EngineConfig
    from featureforge.engine import FeatureEngine
    from featureforge.loader import load_config_file

    config: EngineConfig = (
        load_config_file(Path(args.config)) if args.config else EngineConfig()
    )
    if args.catalog:
        config = config.model_copy(update={"catalog_path": Path(args.catalog)})
    return FeatureEngine.from_config(config)


# ---------------------------------------------------------------------------
# Sub-commands
# ---------------------------------------------------------------------------


def _run_matrix(engine, args: argparse.Namespace) -> int:
    from featureforge.utils import parse_enum_value

    language: Language = parse_enum_value(Language, args.language)
    framework: Framework = (
        parse_enum_value(Framework, args.framework)
        if args.framework
        else engine.matrix.default_framework(language)
    )
    target: Target = engine.matrix.check_target(language, framework)
    supported = engine.matrix.ordered(engine.supported_features(target))
    unsupported = engine.matrix.ordered(engine.unsupported_features(target))
    catalog = engine.catalog

    print(f"\n{'='*50}")
    print(f"  {catalog.language_label(language)} / {catalog.framework_label(framework)}")
    print(f"{'='*50}")
    print(f"\n  Supported ({len(supported)}):")
    for feature in supported:
        print(f"    ✓ {feature.value:<20} {catalog.label(feature)}")
    print(f"\n  Unsupported ({len(unsupported)}):")
    for feature in unsupported:
        print(f"    ✗ {feature.value:<20} {catalog.label(feature)}")
    print(f"{'='*50}\n")
    return EXIT_SUCCESS


def _run_deps(engine, args: argparse.Namespace) -> int:
    from featureforge.utils import parse_feature_key

    feature: FeatureKey = parse_feature_key(args.feature)
    requires = engine.matrix.ordered(engine.dependencies_of(feature))
    required_by = engine.matrix.ordered(engine.dependents_of(feature))

    print(f"{feature.value} ({engine.catalog.label(feature)})")
    print("  requires:    " + (", ".join(f.value for f in requires) or "-"))
    print("  required by: " + (", ".join(f.value for f in required_by) or "-"))
    return EXIT_SUCCESS


def _run_check(engine, args: argparse.Namespace) -> int:
    from featureforge.loader import load_project_file
    from featureforge.utils import Timer

    path: Path = Path(args.project)
    document: ProjectDocument = load_project_file(path, engine.catalog)

    with Timer("check") as t:
        result = engine.check_project(document)

    print(f"\n{'='*50}")
    print(f"  Project Feature Report")
    print(f"{'='*50}")
    print(f"  File:     {path.name}")
    print(f"  Target:   {document.target}")
    print(f"  Enabled:  {len(document.features.enabled_features())}")
    print(f"  Time:     {t.elapsed:.3f}s")
    print(f"  Valid:    {'Yes' if result.is_valid else 'No'}")

    if result.errors:
        print(f"\n  Errors ({len(result.errors)}):")
        for err in result.errors:
            print(f"    ✗ {err}")
            if err.suggestion:
                print(f"      → {err.suggestion}")

    if result.warnings:
        print(f"\n  Warnings ({len(result.warnings)}):")
        for warn in result.warnings:
            print(f"    ⚠ {warn}")

    if result.is_valid and not result.warnings:
        print(f"\n  ✅ All features consistent!")

    print(f"{'='*50}\n")

    return EXIT_SUCCESS if result.is_valid else EXIT_VALIDATION_ERROR


def _mutation_from_args(engine, args: argparse.Namespace) -> Mutation:
    from featureforge.utils import parse_enum_value, parse_feature_key

    if args.framework and (args.enable or args.disable):
        raise ValueError("--framework cannot be combined with --enable or --disable.")
    if args.enable:
        return FeatureToggle(feature=parse_feature_key(args.enable), enabled=True)
    if args.disable:
        return FeatureToggle(feature=parse_feature_key(args.disable), enabled=False)
    if args.language:
        language: Language = parse_enum_value(Language, args.language)
        framework: Framework = (
            parse_enum_value(Framework, args.framework)
            if args.framework
            else engine.matrix.default_framework(language)
        )
        return LanguageChange(language=language, framework=framework)
    if args.framework:
        return FrameworkChange(framework=parse_enum_value(Framework, args.framework))
    raise ValueError("One of --enable, --disable, --language or --framework is required.")


def _run_resolve(engine, args: argparse.Namespace) -> int:
    from featureforge.loader import load_project_file, save_document

    document: ProjectDocument = load_project_file(Path(args.project), engine.catalog)
    mutation: Mutation = _mutation_from_args(engine, args)

    # Resolve from a consistent state.
    fixed, repaired = engine.repair_document(document)
    for change in repaired.changes:
        print(f"  repaired: {change.describe()}")

    result: ResolutionResult = engine.resolve(fixed.features, fixed.target, mutation)

    if not result.accepted:
        print(f"  rejected: {result.rejection}")
        return EXIT_REJECTED

    for change in result.changes:
        print(f"  {change.describe()}")
    for note in engine.notifications_for(result):
        print(f"  {note}")
    print(f"  enabled: {', '.join(f.value for f in result.state.enabled_features()) or '-'}")

    if args.output:
        updated: ProjectDocument = fixed.model_copy(
            update={"features": result.state, "target": result.target}
        )
        save_document(updated, Path(args.output))
    return EXIT_SUCCESS


_COMMANDS = {
    "matrix": _run_matrix,
    "deps": _run_deps,
    "check": _run_check,
    "resolve": _run_resolve,
}


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    if args.quiet:
        verbosity: int = -1
    else:
        verbosity = args.verbose

    _setup_logging(verbosity)
    if args.quiet:
        logging.getLogger("featureforge").setLevel(logging.ERROR)

    try:
        engine = _build_engine(args)
        exit_code: int = _COMMANDS[args.command](engine, args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("%s", exc)
        sys.exit(EXIT_INPUT_ERROR)

    if exit_code != EXIT_SUCCESS:
        logger.info("%s finished with exit code %d.", args.command, exit_code)
    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_VALIDATION_ERROR",
    "EXIT_REJECTED",
    "EXIT_INPUT_ERROR",
]
