"""Sequential execution of the endpoint catalogue."""

import json
import logging
import time
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field, replace
from http import HTTPStatus

from omnichat_validator.auth import CREDENTIAL_FLAGS, SCHEME_LABELS, AuthResolution
from omnichat_validator.models.result import ResponseBody, TestResult
from omnichat_validator.models.spec import AuthScheme, TestSpec
from omnichat_validator.transport import HttpResponse, Transport, TransportError
from omnichat_validator.validation import (
    apply_validation_errors,
    get_response_validator,
)

log = logging.getLogger(__name__)


@dataclass(kw_only=True)
class RunContext:
    """State of one validation run: the auth resolution and ordered results."""

    auth: AuthResolution
    specs: list[TestSpec] = field(default_factory=list)
    results: list[TestResult] = field(default_factory=list)

    def record(self, spec: TestSpec, result: TestResult) -> None:
        """Append a result in execution order."""
        self.specs.append(spec)
        self.results.append(result)

    def entries(self) -> Iterator[tuple[TestSpec, TestResult]]:
        """Each result paired with the spec that produced it, in execution order."""
        return zip(self.specs, self.results, strict=True)


def is_json_content_type(content_type: str) -> bool:
    """Whether a media type declares a JSON body."""
    media_type = content_type.split(";", 1)[0].strip().lower()
    return media_type == "application/json" or media_type.endswith("+json")


def decode_body(response: HttpResponse) -> ResponseBody:
    """Decode JSON bodies, keep everything else as text."""
    text = response.body.decode("utf-8", errors="replace")
    if response.body and is_json_content_type(response.content_type):
        try:
            return json.loads(text)
        except (json.JSONDecodeError, RecursionError):
            log.debug("Body declared as JSON but failed to parse")
    return text


def status_error(status: int) -> str:
    """Format the error message for a non-2xx status."""
    try:
        reason = HTTPStatus(status).phrase
    except ValueError:
        reason = "Unknown Status"
    return f"HTTP {status}: {reason}"


def auth_hint(scheme: AuthScheme) -> str:
    """Remediation text for an endpoint whose credential was not supplied."""
    return (
        f"Requires {SCHEME_LABELS[scheme]} authentication. "
        f"Use {CREDENTIAL_FLAGS[scheme]} flag"
    )


def apply_auth_hint(
    result: TestResult, spec: TestSpec, auth: AuthResolution
) -> TestResult:
    """Append the missing-credential hint to a refused result.

    Only results answered with 401/403 for a scheme whose credential was not
    supplied are changed, and each result is hinted at most once.
    """
    if result.auth_hinted or not result.is_auth_failure:
        return result
    if spec.auth == "none" or auth.is_bound(spec.auth):
        return result

    message = result.error_message or status_error(result.status_code)
    return replace(
        result,
        error_message=f"{message}\n{auth_hint(spec.auth)}",
        auth_hinted=True,
    )


@dataclass(frozen=True, kw_only=True)
class EndpointRunner:
    """Runs catalogue entries one at a time through the right transport."""

    transports: Mapping[AuthScheme, Transport]
    strict_provider_match: bool = True

    async def run(self, specs: Sequence[TestSpec], auth: AuthResolution) -> RunContext:
        """Execute every spec in order and return the populated run context.

        Args:
            specs: Catalogue entries, executed in the given order
            auth: Resolved authentication for the run

        Returns:
            Run context holding one result per spec, auth hints applied

        """
        context = RunContext(auth=auth)
        log.info("Running %d endpoint check(s) (auth: %s)", len(specs), auth.status)

        for spec in specs:
            transport = self.transports[auth.scheme_for(spec.auth)]
            result = await self.execute(spec, transport)
            log.debug(
                "Endpoint completed: name=%s status=%d success=%s duration=%.3fs",
                result.name,
                result.status_code,
                result.success,
                result.duration,
            )
            if result.response_body:
                log.debug("  Response: %.200s", result.response_body)
            context.record(spec, result)

        add_auth_hints(context)
        return context

    async def execute(self, spec: TestSpec, transport: Transport) -> TestResult:
        """Execute one spec and normalize the outcome into a result."""
        start = time.monotonic()
        try:
            response = await transport.request(
                spec.method, spec.path, body=spec.request_body, upload=spec.upload
            )
        except TransportError as e:
            log.warning("%s: %s", spec.name, e)
            return TestResult(
                name=spec.name,
                success=False,
                status_code=0,
                duration=time.monotonic() - start,
                error_message=str(e) or type(e).__name__,
            )
        duration = time.monotonic() - start

        success = 200 <= response.status < 300
        result = TestResult(
            name=spec.name,
            success=success,
            status_code=response.status,
            duration=duration,
            error_message=None if success else status_error(response.status),
            response_body=decode_body(response),
        )

        if success and spec.response_schema is not None:
            validator = get_response_validator(
                spec.response_schema, strict_provider_match=self.strict_provider_match
            )
            result = apply_validation_errors(result, validator(result.response_body))

        return result


def add_auth_hints(context: RunContext) -> None:
    """Apply auth hints to every result of a run, in place of the originals."""
    context.results[:] = [
        apply_auth_hint(result, spec, context.auth)
        for spec, result in context.entries()
    ]
