"""Tests for the endpoint runner."""

import json
from dataclasses import dataclass, field

import pytest

from omnichat_validator.auth import AuthResolution, resolve_auth
from omnichat_validator.models.config import ValidatorConfig
from omnichat_validator.models.requests import FileUpload, RequestBody
from omnichat_validator.models.spec import AuthScheme, HttpMethod, TestSpec
from omnichat_validator.runner import (
    EndpointRunner,
    RunContext,
    add_auth_hints,
    apply_auth_hint,
    decode_body,
    status_error,
)
from omnichat_validator.testing.factories import TestResultFactory, TestSpecFactory
from omnichat_validator.testing.payloads import models_response
from omnichat_validator.transport import HttpResponse, Transport, TransportError


def json_response(status: int, payload: object) -> HttpResponse:
    """Build a JSON response."""
    return HttpResponse(
        status=status,
        content_type="application/json",
        headers={"Content-Type": "application/json"},
        body=json.dumps(payload).encode(),
    )


def text_response(status: int, text: str, content_type: str = "text/plain") -> HttpResponse:
    """Build a non-JSON response."""
    return HttpResponse(
        status=status,
        content_type=content_type,
        headers={"Content-Type": content_type},
        body=text.encode(),
    )


@dataclass(kw_only=True)
class FakeTransport(Transport):
    """Transport returning canned responses keyed by path."""

    scheme: AuthScheme
    responses: dict[str, HttpResponse | TransportError] = field(default_factory=dict)
    default: HttpResponse = field(default_factory=lambda: text_response(200, "ok"))
    calls: list[tuple[str, str]] = field(default_factory=list)

    async def request(
        self,
        method: HttpMethod,
        path: str,
        body: RequestBody | None = None,
        upload: FileUpload | None = None,
    ) -> HttpResponse:
        """Record the call and return the canned response."""
        self.calls.append((method, path))
        response = self.responses.get(path, self.default)
        if isinstance(response, TransportError):
            raise response
        return response


def fake_transports(
    auth: AuthResolution, **responses: dict[str, HttpResponse | TransportError]
) -> dict[AuthScheme, FakeTransport]:
    """Create one fake transport per bound scheme."""
    return {
        scheme: FakeTransport(scheme=scheme, responses=responses.get(scheme, {}))
        for scheme in auth.configs
    }


def auth_for(clerk: str | None = None, bearer: str | None = None) -> AuthResolution:
    """Resolve auth for the given credentials."""
    return resolve_auth(ValidatorConfig(clerk_token=clerk, bearer_token=bearer))


PUBLIC = TestSpecFactory.build(name="GET /api/config", path="/api/config")
MODELS = TestSpecFactory.build(
    name="GET /api/models",
    path="/api/models",
    auth="clerk",
    response_schema="models-catalogue",
)
PROFILE = TestSpecFactory.build(
    name="GET /api/v1/user/profile", path="/api/v1/user/profile", auth="jwt"
)


class TestTransportSelection:
    """Tests for routing specs to transports."""

    @pytest.mark.parametrize(
        ("clerk", "bearer"),
        [(None, None), ("c", None), (None, "j"), ("c", "j")],
    )
    async def test_public_spec_is_unauthenticated(
        self, clerk: str | None, bearer: str | None
    ) -> None:
        """Sends public specs through the unauthenticated transport in every mode."""
        auth = auth_for(clerk, bearer)
        transports = fake_transports(auth)

        await EndpointRunner(transports=transports).run([PUBLIC], auth)

        assert transports["none"].calls == [("GET", "/api/config")]
        assert all(not t.calls for s, t in transports.items() if s != "none")

    async def test_bound_scheme_uses_its_transport(self) -> None:
        """Sends protected specs through their scheme's transport."""
        auth = auth_for(bearer="j")
        transports = fake_transports(auth)

        await EndpointRunner(transports=transports).run([PROFILE], auth)

        assert transports["jwt"].calls == [("GET", "/api/v1/user/profile")]
        assert transports["none"].calls == []

    async def test_unbound_scheme_falls_back(self) -> None:
        """Sends specs for a missing credential unauthenticated."""
        auth = auth_for(bearer="j")
        transports = fake_transports(auth)

        await EndpointRunner(transports=transports).run([MODELS], auth)

        assert transports["none"].calls == [("GET", "/api/models")]


class TestExecute:
    """Tests for single spec execution."""

    async def test_success_parses_json(self) -> None:
        """Marks 2xx as success and decodes JSON bodies."""
        transport = FakeTransport(
            scheme="none", default=json_response(200, {"appUrl": "x"})
        )

        result = await EndpointRunner(transports={}).execute(PUBLIC, transport)

        assert result.success is True
        assert result.status_code == 200
        assert result.error_message is None
        assert result.response_body == {"appUrl": "x"}
        assert result.duration >= 0

    async def test_non_2xx_formats_status(self) -> None:
        """Marks non-2xx as failure with the status text."""
        transport = FakeTransport(
            scheme="none", default=text_response(404, "Not here")
        )

        result = await EndpointRunner(transports={}).execute(PUBLIC, transport)

        assert result.success is False
        assert result.status_code == 404
        assert result.error_message == "HTTP 404: Not Found"
        assert result.response_body == "Not here"

    async def test_transport_error(self) -> None:
        """Records transport errors with status 0."""
        transport = FakeTransport(
            scheme="none",
            responses={"/api/config": TransportError("Request timed out after 1s")},
        )

        result = await EndpointRunner(transports={}).execute(PUBLIC, transport)

        assert result.success is False
        assert result.status_code == 0
        assert result.error_message == "Request timed out after 1s"

    async def test_schema_failure_downgrades_2xx(self) -> None:
        """Forces failure when the model catalogue is broken."""
        transport = FakeTransport(
            scheme="clerk", default=json_response(200, {"providers": {}})
        )

        result = await EndpointRunner(transports={}).execute(MODELS, transport)

        assert result.success is False
        assert result.status_code == 200
        assert result.error_message == "No providers found"

    async def test_valid_schema_stays_successful(self) -> None:
        """Keeps success for a valid model catalogue."""
        transport = FakeTransport(
            scheme="clerk", default=json_response(200, models_response())
        )

        result = await EndpointRunner(transports={}).execute(MODELS, transport)

        assert result.success is True
        assert result.error_message is None

    async def test_schema_not_checked_on_failure(self) -> None:
        """Leaves the status error alone when the request already failed."""
        transport = FakeTransport(
            scheme="none", default=text_response(401, "Unauthorized")
        )

        result = await EndpointRunner(transports={}).execute(MODELS, transport)

        assert result.error_message == "HTTP 401: Unauthorized"

    async def test_lenient_provider_match(self) -> None:
        """Honours the strictness flag for provider names."""
        payload = {
            "providers": {
                "openai": [
                    {
                        "id": "m",
                        "name": "M",
                        "provider": "OpenAI",
                        "contextWindow": 1,
                        "maxOutput": 1,
                    }
                ]
            }
        }
        transport = FakeTransport(scheme="clerk", default=json_response(200, payload))
        runner = EndpointRunner(transports={}, strict_provider_match=False)

        result = await runner.execute(MODELS, transport)

        assert result.success is True


class TestRun:
    """Tests for full runs."""

    async def test_keeps_catalogue_order(self) -> None:
        """Results follow the order of the specs."""
        auth = auth_for("c", "j")
        specs = [PROFILE, PUBLIC, MODELS]
        transports = fake_transports(
            auth, clerk={"/api/models": json_response(200, models_response())}
        )

        context = await EndpointRunner(transports=transports).run(specs, auth)

        assert [r.name for r in context.results] == [s.name for s in specs]

    async def test_continues_after_transport_error(self) -> None:
        """Runs later specs after a timeout."""
        auth = auth_for()
        transports = fake_transports(
            auth, none={"/api/config": TransportError("Request timed out after 1s")}
        )

        context = await EndpointRunner(transports=transports).run(
            [PUBLIC, PROFILE], auth
        )

        assert context.results[0].status_code == 0
        assert "timed out" in (context.results[0].error_message or "")
        assert context.results[1].status_code == 200
        assert transports["none"].calls == [
            ("GET", "/api/config"),
            ("GET", "/api/v1/user/profile"),
        ]

    async def test_adds_auth_hints(self) -> None:
        """Hints at the missing flag on refused protected endpoints."""
        auth = auth_for()
        transports = fake_transports(
            auth,
            none={
                "/api/models": text_response(401, "Unauthorized"),
                "/api/v1/user/profile": text_response(403, "Forbidden"),
            },
        )

        context = await EndpointRunner(transports=transports).run(
            [MODELS, PROFILE], auth
        )

        assert context.results[0].error_message == (
            "HTTP 401: Unauthorized\nRequires Clerk authentication. Use --clerk flag"
        )
        assert context.results[1].error_message == (
            "HTTP 403: Forbidden\nRequires JWT authentication. Use --bearer flag"
        )

    async def test_duplicate_names_keep_their_own_spec(self) -> None:
        """Hints follow each spec even when two specs share a name."""
        auth = auth_for()
        public = TestSpecFactory.build(name="GET /api/shared", path="/api/shared")
        protected = TestSpecFactory.build(
            name="GET /api/shared", path="/api/shared", auth="clerk"
        )
        transports = fake_transports(
            auth, none={"/api/shared": text_response(401, "Unauthorized")}
        )

        context = await EndpointRunner(transports=transports).run(
            [protected, public], auth
        )

        assert [spec for spec, _ in context.entries()] == [protected, public]
        assert context.results[0].error_message == (
            "HTTP 401: Unauthorized\nRequires Clerk authentication. Use --clerk flag"
        )
        assert context.results[1].error_message == "HTTP 401: Unauthorized"
        assert context.results[1].auth_hinted is False

    async def test_continues_after_deeply_nested_body(self) -> None:
        """Runs later specs after a JSON body too deep to decode."""
        auth = auth_for()
        nested = "[" * 100_000 + "]" * 100_000
        transports = fake_transports(
            auth,
            none={"/api/config": text_response(200, nested, content_type="application/json")},
        )

        context = await EndpointRunner(transports=transports).run(
            [PUBLIC, PROFILE], auth
        )

        assert context.results[0].success is True
        assert context.results[0].response_body == nested
        assert len(context.results) == 2


class TestAuthHint:
    """Tests for apply_auth_hint."""

    def test_skips_bound_scheme(self) -> None:
        """Leaves refusals alone when the credential was supplied."""
        result = TestResultFactory.build(
            name=MODELS.name, success=False, status_code=401, error_message="HTTP 401"
        )

        assert apply_auth_hint(result, MODELS, auth_for(clerk="c")) is result

    def test_skips_public_spec(self) -> None:
        """Never hints public endpoints."""
        result = TestResultFactory.build(
            name=PUBLIC.name, success=False, status_code=401, error_message="HTTP 401"
        )

        assert apply_auth_hint(result, PUBLIC, auth_for()) is result

    def test_skips_other_failures(self) -> None:
        """Only hints 401 and 403."""
        result = TestResultFactory.build(
            name=MODELS.name, success=False, status_code=500, error_message="HTTP 500"
        )

        assert apply_auth_hint(result, MODELS, auth_for()) is result

    def test_keeps_status_and_success(self) -> None:
        """Changes only the message."""
        result = TestResultFactory.build(
            name=MODELS.name, success=False, status_code=403, error_message="HTTP 403"
        )

        hinted = apply_auth_hint(result, MODELS, auth_for())

        assert hinted.success is False
        assert hinted.status_code == 403
        assert hinted.auth_hinted is True

    def test_is_idempotent(self) -> None:
        """Applying the hint pass twice appends the text once."""
        result = TestResultFactory.build(
            name=MODELS.name, success=False, status_code=401, error_message="HTTP 401"
        )
        context = RunContext(auth=auth_for())
        context.record(MODELS, result)

        add_auth_hints(context)
        once = context.results[0]
        add_auth_hints(context)

        assert context.results[0] == once
        assert once.error_message is not None
        assert once.error_message.count("--clerk") == 1


class TestDecodeBody:
    """Tests for response body decoding."""

    def test_json_with_charset(self) -> None:
        """Decodes JSON when the content type carries parameters."""
        response = text_response(
            200, '{"a": 1}', content_type="application/json; charset=utf-8"
        )

        assert decode_body(response) == {"a": 1}

    def test_invalid_json_falls_back_to_text(self) -> None:
        """Keeps the text when a JSON body does not parse."""
        response = text_response(401, "Unauthorized", content_type="application/json")

        assert decode_body(response) == "Unauthorized"

    def test_non_json_stays_text(self) -> None:
        """Keeps non-JSON bodies as text."""
        response = text_response(200, '{"a": 1}', content_type="text/html")

        assert decode_body(response) == '{"a": 1}'

    def test_empty_json_body(self) -> None:
        """Keeps empty bodies as empty text."""
        assert decode_body(text_response(204, "", content_type="application/json")) == ""

    def test_deeply_nested_json_falls_back_to_text(self) -> None:
        """Keeps the text when JSON nesting exceeds the decoder's depth."""
        nested = "[" * 100_000 + "]" * 100_000
        response = text_response(200, nested, content_type="application/json")

        assert decode_body(response) == nested


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (401, "HTTP 401: Unauthorized"),
        (500, "HTTP 500: Internal Server Error"),
        (599, "HTTP 599: Unknown Status"),
    ],
)
def test_status_error(status: int, expected: str) -> None:
    """Formats status codes with their reason phrase."""
    assert status_error(status) == expected
