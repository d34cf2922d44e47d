"""Command-line interface for the onthisday application."""

from __future__ import annotations

import argparse
import dataclasses
import logging
import os
import pprint
from pathlib import Path
from typing import List, Optional

from .config import (
    DATE_INPUTS,
    OUTPUT_FORMATS,
    parse_app_config,
    parse_env_config,
    validate_choice,
)
from .dates import parse_date, valid_dates
from .runner import RunConfig, execute

logger = logging.getLogger(__name__)

API_TOKEN_ENV = "WIKIMEDIA_API_TOKEN"


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Show historical events that happened on a given day, from Wikipedia."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration XML file. Built-in defaults are used if omitted.",
    )
    parser.add_argument(
        "--date",
        default="today",
        help="Date to look up: YYYY-MM-DD, MM/DD, today, yesterday or tomorrow.",
    )
    parser.add_argument(
        "--date-input",
        choices=DATE_INPUTS,
        default=None,
        help="Date selection style. 'dropdown' only allows days of the current year. Overrides config.",
    )
    parser.add_argument(
        "--list-dates",
        action="store_true",
        help="Print the dates offered by the dropdown and exit.",
    )
    parser.add_argument(
        "--format",
        choices=OUTPUT_FORMATS,
        default=None,
        help="Output format. Overrides config.",
    )
    parser.add_argument(
        "--story",
        type=int,
        metavar="N",
        help="Show the detail view of the N-th listed story.",
    )
    parser.add_argument(
        "--search",
        metavar="TEXT",
        help="Only list stories whose title contains TEXT.",
    )
    parser.add_argument(
        "--output",
        metavar="PATH",
        help="Also write the rendered output to PATH.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Initialise logging according to options."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    else:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.story is not None and args.story < 1:
        parser.error("--story must be 1 or greater.")

    try:
        app_config = parse_app_config(args.config)

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)

        # CLI overrides config
        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        date_input = args.date_input or app_config.date_input
        if args.list_dates:
            for choice in valid_dates():
                print(choice.isoformat())
            return 0

        config = RunConfig(
            selected=parse_date(args.date),
            date_input=validate_choice("date input", date_input, DATE_INPUTS),
            output_format=args.format or app_config.output_format,
            story=args.story,
            search=args.search,
            output_path=args.output,
            base_url=app_config.api.base_url,
            language=app_config.api.language,
            timeout=app_config.api.timeout,
            retries=app_config.api.retries,
            api_token=os.environ.get(API_TOKEN_ENV) or None,
            user_agent=app_config.api.user_agent,
        )

        config_dict = dataclasses.asdict(config)
        if config_dict.get("api_token"):
            config_dict["api_token"] = "***MASKED***"

        logger.info("Active Configuration:\n%s", pprint.pformat(config_dict))

        result = execute(config)
    except ValueError as exc:
        parser.error(str(exc))
    except (RuntimeError, FileNotFoundError) as exc:
        logger.error("%s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    print(result.output_text)
    return 0 if result.ok else 1
