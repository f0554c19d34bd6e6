"""Models for endpoint test results."""

from dataclasses import dataclass
from typing import Any

type ResponseBody = Any


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Outcome of executing one catalogue entry.

    ``response_body`` holds decoded JSON when the server declared a JSON
    content type, raw text otherwise. ``status_code`` is 0 when no response
    was received.
    """

    __test__ = False

    name: str
    success: bool
    status_code: int
    duration: float
    error_message: str | None = None
    response_body: ResponseBody = None
    auth_hinted: bool = False

    @property
    def is_auth_failure(self) -> bool:
        """Whether the result failed because the server refused the credentials."""
        return not self.success and self.status_code in AUTH_FAILURE_CODES


AUTH_FAILURE_CODES = frozenset({401, 403})
