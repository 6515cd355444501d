import argparse
import json
import logging
from pathlib import Path
from typing import Optional

import colorlog

from td_validator import __version__
from td_validator.core.schemas import TD_SCHEMA, TD_SCHEMA_FULL, TM_SCHEMA, load_schema
from td_validator.exceptions import ConfigError

SCHEMA_CHOICES = {
    "td": TD_SCHEMA,
    "td-full": TD_SCHEMA_FULL,
    "tm": TM_SCHEMA,
}


def setup_logging(
    verbose: bool = False, warnings_only: bool = False, errors_only: bool = False
) -> None:
    logger = logging.getLogger()
    for h in list(logger.handlers):
        logger.removeHandler(h)
    log_format = "%(levelname)s:%(name)s: %(message)s"
    if verbose:
        log_format = (
            "%(asctime)s:%(levelname)s:%(name)s in %(filename)s:%(funcName)s:%(lineno)d: %(message)s"
        )
    log_colors = {
        "DEBUG": "cyan",
        "INFO": "green",
        "WARNING": "yellow",
        "ERROR": "red",
        "CRITICAL": "bold_red",
    }
    stream_handler = colorlog.StreamHandler()
    formatter = colorlog.ColoredFormatter(f"%(log_color)s{log_format}", log_colors=log_colors)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    if errors_only:
        logger.setLevel(logging.ERROR)
    elif warnings_only:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    # Keep HTTP client chatter from remote context fetches out of the output
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def _build_config(args: argparse.Namespace):
    """Merge the optional YAML config file with command-line flags.

    Flags only override the file when given on the command line.
    """
    from td_validator.validation.config import ValidationConfig, load_config

    config_path = getattr(args, "config", None)
    config = load_config(config_path) if config_path else ValidationConfig()
    return config.replace(
        offline=True if getattr(args, "offline", False) else None,
        junit=True if getattr(args, "junit", False) else None,
        junit_path=getattr(args, "junit_path", None),
        report_json=getattr(args, "report_json", None),
        jsonld_timeout=getattr(args, "jsonld_timeout", None),
        allow_empty=True if getattr(args, "allow_empty", False) else None,
        show_progress=False if getattr(args, "no_progress", False) else None,
    )


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate TD/TM files and directories.

    Every document runs through the JSON, schema, defaults and JSON-LD stages.
    A failure in one document never stops validation of the others.

    Returns:
        0 if all documents are valid
        1 if any document is invalid or unreadable, or none was found
        2 if the configuration is invalid
    """
    from td_validator.validation.registry import print_report, run_validation
    from td_validator.validation.reporting import write_json_report, write_junit_report

    try:
        config = _build_config(args)
    except ConfigError as e:
        logging.error("%s", e)
        return 2

    paths = list(getattr(args, "paths", None) or [])
    if not paths:
        logging.error("No input files or directories given")
        return 2

    if config.offline:
        logging.info("Offline mode: JSON-LD validation is skipped")

    run = run_validation(paths, config)

    if run.document_count == 0:
        logging.warning("No JSON or JSON-LD documents found.")

    if config.junit:
        try:
            write_junit_report(run, config.junit_path)
        except OSError as e:
            logging.error("Failed to write JUnit report %s: %s", config.junit_path, e)

    if config.report_json:
        try:
            write_json_report(run, config.report_json, offline=config.offline)
        except OSError as e:
            logging.error("Failed to write JSON report %s: %s", config.report_json, e)

    print_report(run)

    exit_code = run.exit_code(allow_empty=config.allow_empty)
    if exit_code != 0 and run.document_count:
        logging.error(
            "Validation failed for %d of %d documents.",
            len(run.get_failed_things()) + len(run.read_errors),
            run.document_count,
        )
    return exit_code


def cmd_schema(args: argparse.Namespace) -> int:
    """Print one of the bundled JSON Schemas."""
    schema = load_schema(SCHEMA_CHOICES[args.name])
    print(json.dumps(schema, indent=4, ensure_ascii=False))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="td-validator",
        description=f"Validate JSON files against the Thing Description schema (v{__version__})",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    p.add_argument(
        "--warnings-only",
        action="store_true",
        help="Show only warnings and errors (overrides --verbose)",
    )
    p.add_argument(
        "--errors-only",
        action="store_true",
        help="Show only errors (overrides --warnings-only and --verbose)",
    )

    sub = p.add_subparsers(dest="command", required=True)

    p_validate = sub.add_parser("validate", help="Validate TD and TM documents")
    p_validate.add_argument(
        "paths",
        nargs="+",
        help="Files or directories. Directories are searched recursively for .json and .jsonld files.",
    )
    p_validate.add_argument(
        "-o",
        "--offline",
        action="store_true",
        help="Run in offline mode (skip JSON-LD validation)",
    )
    p_validate.add_argument(
        "-j",
        "--junit",
        action="store_true",
        help="Generate a JUnit report (report.xml unless --junit-path is given)",
    )
    p_validate.add_argument(
        "--junit-path",
        type=Path,
        default=None,
        help="Where to write the JUnit report when --junit is set",
    )
    p_validate.add_argument(
        "--report-json",
        type=Path,
        default=None,
        help="Write a detailed JSON report to this file",
    )
    p_validate.add_argument(
        "--jsonld-timeout",
        type=float,
        default=None,
        help="Seconds allowed for JSON-LD processing of one document (0 disables, default 30)",
    )
    p_validate.add_argument(
        "--config",
        default=None,
        help="YAML file with validation options; command-line flags take precedence",
    )
    p_validate.add_argument(
        "--allow-empty",
        action="store_true",
        help="Exit with 0 when no documents are found",
    )
    p_validate.add_argument(
        "--no-progress",
        action="store_true",
        help="Do not display a progress bar",
    )
    p_validate.set_defaults(func=cmd_validate)

    p_schema = sub.add_parser("schema", help="Print a bundled JSON Schema")
    p_schema.add_argument(
        "name",
        choices=sorted(SCHEMA_CHOICES),
        help="Schema to print",
    )
    p_schema.set_defaults(func=cmd_schema)

    return p


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(
        verbose=bool(args.verbose),
        warnings_only=bool(getattr(args, "warnings_only", False)),
        errors_only=bool(getattr(args, "errors_only", False)),
    )
    return args.func(args)


if __name__ == "__main__":
    raise SystemExit(main())
