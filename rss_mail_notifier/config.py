"""Configuration management."""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "rss_mail_notifier.json"
CONFIG_PATH_ENV = "RSS_NOTIFIER_CONFIG"
DEFAULT_SMTP_PORT = 587
DEFAULT_TO_NAME = "Feed Notification Receiver"

# JSON key -> Config attribute; "from" is a Python keyword
REQUIRED_KEYS = {
    "local_rss": "local_rss",
    "remote_rss": "remote_rss",
    "subject": "subject",
    "from": "from_addr",
    "to": "to_addr",
    "password": "password",
    "server": "server",
}


@dataclass(frozen=True)
class Config:
    """Run parameters, loaded once per run."""
    local_rss: str        # path of the snapshot file
    remote_rss: str       # feed URL
    subject: str
    from_addr: str
    to_addr: str
    password: str = field(repr=False)
    server: str           # SMTP host
    to_name: str = DEFAULT_TO_NAME
    smtp_port: int = DEFAULT_SMTP_PORT
    template_dir: Optional[str] = None  # None means the bundled templates


def default_config_path() -> str:
    """
    Return the configuration path for this run.

    A ``.env`` file is loaded first so ``RSS_NOTIFIER_CONFIG`` can be set
    there; otherwise the conventional file in the working directory is used.
    """
    load_dotenv(find_dotenv(usecwd=True))
    return os.getenv(CONFIG_PATH_ENV, DEFAULT_CONFIG_FILE)


def _validate(data: Any, path: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: top-level value must be a JSON object", {"path": path})

    missing: List[str] = [key for key in REQUIRED_KEYS if key not in data]
    if missing:
        raise ConfigError(
            f"{path}: missing required field(s): {', '.join(missing)}",
            {"path": path, "missing": missing},
        )

    mistyped = [key for key in REQUIRED_KEYS if not isinstance(data[key], str)]
    if "to_name" in data and not isinstance(data["to_name"], str):
        mistyped.append("to_name")
    if "template_dir" in data and not isinstance(data["template_dir"], str):
        mistyped.append("template_dir")
    port = data.get("smtp_port", DEFAULT_SMTP_PORT)
    # bool is an int subclass
    if isinstance(port, bool) or not isinstance(port, int):
        mistyped.append("smtp_port")
    if mistyped:
        raise ConfigError(
            f"{path}: field(s) with wrong type: {', '.join(mistyped)}",
            {"path": path, "mistyped": mistyped},
        )
    return data


def load_config(path: str) -> Config:
    """
    Load and validate the JSON configuration file.

    Args:
        path: Path to the configuration file.

    Returns:
        The populated Config.

    Raises:
        ConfigError: If the file is missing, unreadable, not valid JSON,
            or a required field is missing or has the wrong type.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config file {path}: {e}", {"path": path}) from e
    except ValueError as e:
        # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
        raise ConfigError(f"invalid JSON in config file {path}: {e}", {"path": path}) from e

    data = _validate(data, path)
    kwargs = {attr: data[key] for key, attr in REQUIRED_KEYS.items()}
    config = Config(
        to_name=data.get("to_name", DEFAULT_TO_NAME),
        smtp_port=data.get("smtp_port", DEFAULT_SMTP_PORT),
        template_dir=data.get("template_dir"),
        **kwargs,
    )
    logger.info(f"Loaded configuration from {path} (feed: {config.remote_rss})")
    return config
