"""
Configuration for the secretcli package.

Defaults mirror the behaviour test scripts expect from ``secretd``; every
value can be overridden explicitly or through ``SECRETCLI_*`` environment
variables via :meth:`CLIConfig.from_env`.
"""
import os
import logging
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

DEFAULT_BINARY = "secretd"
DEFAULT_OUTPUT_FLAGS = ["--output", "json"]
DEFAULT_MAX_RETRIES = 20
DEFAULT_RETRY_INTERVAL = 1.0
DEFAULT_CACHE_DIR = "../cached_contracts/"
DEFAULT_SIGN_FILE = "tx_to_sign"

AttributeScan = Literal["first_event", "all"]


class CLIConfig(BaseModel):
    """Settings shared by the runner, the client and the contract cache"""
    binary: str = DEFAULT_BINARY
    output_flags: List[str] = Field(default_factory=lambda: list(DEFAULT_OUTPUT_FLAGS))
    max_retries: int = Field(DEFAULT_MAX_RETRIES, ge=0)
    retry_interval: float = Field(DEFAULT_RETRY_INTERVAL, ge=0)
    cache_dir: str = DEFAULT_CACHE_DIR
    sign_file: str = DEFAULT_SIGN_FILE
    attribute_scan: AttributeScan = "first_event"

    @field_validator("binary", "sign_file")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "CLIConfig":
        """
        Build a configuration from environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            CLIConfig with any ``SECRETCLI_*`` overrides applied

        Raises:
            pydantic.ValidationError: If an override has an invalid value
        """
        env = os.environ if environ is None else environ
        overrides = {}
        for field, var in (
            ("binary", "SECRETCLI_BINARY"),
            ("max_retries", "SECRETCLI_MAX_RETRIES"),
            ("retry_interval", "SECRETCLI_RETRY_INTERVAL"),
            ("cache_dir", "SECRETCLI_CACHE_DIR"),
            ("sign_file", "SECRETCLI_SIGN_FILE"),
            ("attribute_scan", "SECRETCLI_ATTRIBUTE_SCAN"),
        ):
            value = env.get(var)
            if value:
                overrides[field] = value

        if overrides:
            logger.debug(f"Configuration overrides from environment: {sorted(overrides)}")
        return cls.model_validate(overrides)
