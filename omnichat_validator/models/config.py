"""Configuration for a validation run."""

import re

from pydantic import BaseModel, Field, SecretStr, field_validator

DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_TIMEOUT = 30.0

_NUMBER_RE = re.compile(r"^\d+(?:\.\d+)?$")
_DURATION_RE = re.compile(r"^(?:\d+(?:\.\d+)?(?:ms|s|m|h))+$")
_DURATION_PART_RE = re.compile(r"(?P<value>\d+(?:\.\d+)?)(?P<unit>ms|s|m|h)")
_UNIT_SECONDS = {"ms": 0.001, "s": 1.0, "m": 60.0, "h": 3600.0}


def parse_duration(value: str | float) -> float:
    """Parse a duration such as '30s', '1m30s', '500ms' or '12.5' into seconds."""
    if isinstance(value, int | float):
        seconds = float(value)
    elif _NUMBER_RE.match(text := value.strip()):
        seconds = float(text)
    elif _DURATION_RE.match(text):
        seconds = sum(
            float(part["value"]) * _UNIT_SECONDS[part["unit"]]
            for part in _DURATION_PART_RE.finditer(text)
        )
    else:
        raise ValueError(f"Invalid duration: {value!r}")

    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return seconds


class ValidatorConfig(BaseModel):
    """Already-parsed command line configuration."""

    base_url: str = DEFAULT_BASE_URL
    clerk_token: SecretStr | None = None
    bearer_token: SecretStr | None = None
    timeout: float = DEFAULT_TIMEOUT
    verbose: bool = False
    strict_provider_match: bool = True

    @field_validator("base_url")
    @classmethod
    def _normalize_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return value.rstrip("/")

    @field_validator("timeout", mode="before")
    @classmethod
    def _parse_timeout(cls, value: str | float) -> float:
        return parse_duration(value)

    @field_validator("clerk_token", "bearer_token", mode="before")
    @classmethod
    def _empty_token_is_none(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class TransportConfig(BaseModel):
    """Settings bound to a single transport: where, how long, which credential."""

    base_url: str
    timeout: float = Field(gt=0)
    token: SecretStr | None = None
