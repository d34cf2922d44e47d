"""Configuration loading for onthisday."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional
from xml.etree import ElementTree as ET

from .events import (
    DEFAULT_BASE_URL,
    DEFAULT_LANGUAGE,
    DEFAULT_TIMEOUT,
    DEFAULT_USER_AGENT,
)

logger = logging.getLogger(__name__)

DATE_INPUTS = ("picker", "dropdown")
OUTPUT_FORMATS = ("text", "markdown", "html")


@dataclass
class ApiConfig:
    base_url: str = DEFAULT_BASE_URL
    language: str = DEFAULT_LANGUAGE
    timeout: float = DEFAULT_TIMEOUT
    retries: int = 1
    user_agent: str = DEFAULT_USER_AGENT


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[str] = None


@dataclass
class AppConfig:
    env_file: Optional[str] = None
    api: ApiConfig = field(default_factory=ApiConfig)
    date_input: str = "picker"
    output_format: str = "text"
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _resolve_path(base_path: Path, target_path: str) -> str:
    """Resolve a path relative to the base config file if it's not absolute."""
    target = Path(target_path)
    if target.is_absolute():
        return str(target)
    return str((base_path.parent / target).resolve())


def parse_env_config(path: str) -> Dict[str, str]:
    """Parse environment variables from XML."""
    env_vars = {}
    if not path:
        return env_vars

    logger.info("Loading environment configuration from %s", path)
    try:
        tree = ET.parse(path)
        root = tree.getroot()
        for var in root.findall("variable"):
            name = var.attrib.get("name")
            value = var.text
            if name and value:
                env_vars[name] = value.strip()
    except Exception as exc:
        logger.warning("Failed to load environment config: %s", exc)
        raise

    return env_vars


def _parse_api(node: Optional[ET.Element]) -> ApiConfig:
    api = ApiConfig()
    if node is None:
        return api

    api.base_url = (node.findtext("base-url") or api.base_url).strip()
    api.language = (node.findtext("language") or api.language).strip()
    api.user_agent = (node.findtext("user-agent") or api.user_agent).strip()

    timeout = node.findtext("timeout")
    if timeout:
        api.timeout = float(timeout)
        if api.timeout <= 0:
            raise ValueError("<api><timeout> must be positive.")

    retries = node.findtext("retries")
    if retries:
        api.retries = int(retries)
        if api.retries < 0:
            raise ValueError("<api><retries> must not be negative.")

    return api


def validate_choice(name: str, value: str, choices) -> str:
    normalised = value.strip().lower()
    if normalised not in choices:
        raise ValueError(
            f"Unsupported {name}: {value!r} (expected one of {', '.join(choices)})"
        )
    return normalised


def parse_app_config(path: Optional[str]) -> AppConfig:
    """Parse the main application configuration XML.

    With ``path=None`` the built-in defaults are returned.
    """
    if path is None:
        logger.debug("No configuration file given; using defaults")
        return AppConfig()

    config_path = Path(path).resolve()
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading application configuration from %s", config_path)
    tree = ET.parse(config_path)
    root = tree.getroot()

    # Env
    env_node = root.find("env")
    env_file = (
        _resolve_path(config_path, env_node.text.strip())
        if env_node is not None and env_node.text
        else None
    )

    api = _parse_api(root.find("api"))

    date_input = validate_choice(
        "date input", root.findtext("date-input", "picker"), DATE_INPUTS
    )
    output_format = validate_choice(
        "output format", root.findtext("format", "text"), OUTPUT_FORMATS
    )

    # Logging
    log_node = root.find("logging")
    logging_config = LoggingConfig()
    if log_node is not None:
        logging_config.level = log_node.findtext("level", "INFO")
        log_file = log_node.findtext("file")
        if log_file:
            logging_config.file = _resolve_path(config_path, log_file)

    return AppConfig(
        env_file=env_file,
        api=api,
        date_input=date_input,
        output_format=output_format,
        logging=logging_config,
    )
