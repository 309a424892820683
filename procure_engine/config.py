"""
Pipeline configuration.

Values come from the process environment (optionally seeded from a .env file).
Nothing is required: without ANTHROPIC_API_KEY every stage runs its
deterministic path.
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"

ENV_VARS = {
    "anthropic_api_key": "ANTHROPIC_API_KEY",
    "anthropic_model": "ANTHROPIC_MODEL",
    "general_approval_threshold": "GENERAL_APPROVAL_THRESHOLD",
    "source_failure_rate": "SOURCE_FAILURE_RATE",
    "approval_on_compliance_failure": "APPROVAL_ON_COMPLIANCE_FAILURE",
    "directory_file": "DIRECTORY_FILE",
    "log_level": "LOG_LEVEL",
}


class Settings(BaseModel):
    """Runtime settings for a procurement pipeline."""
    anthropic_api_key: Optional[str] = Field(None, repr=False)
    anthropic_model: str = DEFAULT_MODEL
    general_approval_threshold: float = Field(10000.0, ge=0)
    source_failure_rate: float = Field(0.15, ge=0, le=1)
    approval_on_compliance_failure: bool = False
    directory_file: str = "./data/directory.json"
    log_level: str = "INFO"

    @property
    def enhancement_enabled(self) -> bool:
        return bool(self.anthropic_api_key)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"Environment variable {name} must be a number, got {raw!r}")


def _bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load and validate environment configuration.

    Args:
        env_file: Optional path to a .env file (defaults to searching upward from cwd)

    Returns:
        Settings instance

    Raises:
        RuntimeError: If a variable cannot be parsed or is out of range
    """
    load_dotenv(env_file)

    try:
        settings = Settings(
            anthropic_api_key=os.getenv('ANTHROPIC_API_KEY') or None,
            anthropic_model=os.getenv('ANTHROPIC_MODEL', DEFAULT_MODEL),
            general_approval_threshold=_float_env('GENERAL_APPROVAL_THRESHOLD', 10000.0),
            source_failure_rate=_float_env('SOURCE_FAILURE_RATE', 0.15),
            approval_on_compliance_failure=_bool_env('APPROVAL_ON_COMPLIANCE_FAILURE', False),
            directory_file=os.getenv('DIRECTORY_FILE', './data/directory.json'),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper()
        )
    except ValidationError as e:
        names = ", ".join(
            ENV_VARS.get(str(err["loc"][0]), str(err["loc"][0])) for err in e.errors()
        )
        raise RuntimeError(f"Invalid value for environment variable(s) {names}: {e}") from e

    if not settings.enhancement_enabled:
        logger.info("ANTHROPIC_API_KEY not set; using deterministic stage logic")

    return settings
