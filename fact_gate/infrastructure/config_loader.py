"""Loading of quality-gate configuration and environment settings."""

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Union

from dotenv import load_dotenv
from pydantic import ValidationError

from ..domain.errors import ConfigurationError
from ..domain.models.config import QualityGatesConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/quality-gates.json"
CONFIG_PATH_ENV = "FACT_GATE_CONFIG"
LOG_LEVEL_ENV = "FACT_GATE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def load_environment() -> None:
    """Load variables from a ``.env`` file, if one exists, into the environment."""
    if load_dotenv():
        logger.info("📁 Environment variables loaded from .env file via python-dotenv")


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging once for an entry point."""
    level_name = (level or os.getenv(LOG_LEVEL_ENV) or "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format=LOG_FORMAT,
    )


def parse_config(data: Dict[str, Any]) -> QualityGatesConfig:
    """Validate a raw configuration mapping.

    Raises:
        ConfigurationError: If any value is out of range or inconsistent
    """
    try:
        return QualityGatesConfig.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
            for err in e.errors()
        )
        raise ConfigurationError(f"Invalid quality gate configuration: {problems}") from e


def load_config(path: Optional[Union[str, Path]] = None) -> QualityGatesConfig:
    """Load quality-gate configuration.

    The path defaults to ``$FACT_GATE_CONFIG`` and then
    ``config/quality-gates.json``. A missing file yields the defaults.

    Raises:
        ConfigurationError: On malformed JSON or invalid values
    """
    config_path = Path(path or os.getenv(CONFIG_PATH_ENV) or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        logger.info(f"⚙️ No config at {config_path}, using defaults")
        return QualityGatesConfig()

    try:
        data = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Malformed JSON in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigurationError(f"Could not read {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"{config_path} must contain a JSON object")

    config = parse_config(data)
    logger.info(f"⚙️ Loaded quality gate config from {config_path}")
    return config
