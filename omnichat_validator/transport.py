"""HTTP transport used to reach the API under test."""

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncGenerator, Mapping
from contextlib import AsyncExitStack, asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

import aiohttp

from omnichat_validator.auth import AuthResolution
from omnichat_validator.models.config import TransportConfig
from omnichat_validator.models.requests import FileUpload, RequestBody
from omnichat_validator.models.spec import AuthScheme, HttpMethod

log = logging.getLogger(__name__)


class TransportError(Exception):
    """Raised when no HTTP response could be obtained."""


@dataclass(frozen=True, kw_only=True)
class HttpResponse:
    """Fully read HTTP response."""

    status: int
    content_type: str
    headers: Mapping[str, str]
    body: bytes


class Transport(ABC):
    """Issues a single HTTP request against the API under test."""

    @abstractmethod
    async def request(
        self,
        method: HttpMethod,
        path: str,
        body: RequestBody | None = None,
        upload: FileUpload | None = None,
    ) -> HttpResponse:
        """Send a request and read the whole response.

        Args:
            method: HTTP method
            path: Path relative to the base URL, query string included
            body: JSON body to send
            upload: Multipart upload to send instead of a JSON body

        Returns:
            The response, whatever its status

        Raises:
            TransportError: On connection failure, timeout or unreadable response

        """


def build_form_data(upload: FileUpload) -> aiohttp.FormData:
    """Build a multipart body carrying the extra fields and the file."""
    form = aiohttp.FormData()
    for name, value in upload.fields.items():
        form.add_field(name, value)
    form.add_field(
        upload.field_name,
        upload.content,
        filename=upload.filename,
        content_type=upload.content_type,
    )
    return form


@dataclass(frozen=True, kw_only=True)
class AiohttpTransport(Transport):
    """Transport backed by an aiohttp session bound to one credential."""

    config: TransportConfig
    session: aiohttp.ClientSession = field(repr=False)

    @classmethod
    @asynccontextmanager
    async def from_config(
        cls, config: TransportConfig
    ) -> AsyncGenerator["AiohttpTransport", None]:
        """Create transport with managed session lifecycle."""
        headers = {"Accept": "application/json"}
        if config.token is not None:
            headers["Authorization"] = f"Bearer {config.token.get_secret_value()}"

        async with aiohttp.ClientSession(
            headers=headers,
            timeout=aiohttp.ClientTimeout(total=config.timeout),
        ) as session:
            yield cls(config=config, session=session)

    async def request(
        self,
        method: HttpMethod,
        path: str,
        body: RequestBody | None = None,
        upload: FileUpload | None = None,
    ) -> HttpResponse:
        """Send a request through the bound session."""
        url = f"{self.config.base_url}{path}"
        kwargs: dict[str, Any] = {}
        if body is not None:
            kwargs["json"] = body.model_dump(mode="json", by_alias=True, exclude_none=True)
        elif upload is not None:
            kwargs["data"] = build_form_data(upload)

        log.debug("%s %s", method, url)
        try:
            async with self.session.request(method, url, **kwargs) as response:
                payload = await response.read()
                return HttpResponse(
                    status=response.status,
                    content_type=response.content_type,
                    headers=dict(response.headers),
                    body=payload,
                )
        except TimeoutError as e:
            raise TransportError(
                f"Request timed out after {self.config.timeout:g}s: {method} {url}"
            ) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{type(e).__name__}: {e}") from e


@asynccontextmanager
async def open_transports(
    auth: AuthResolution,
) -> AsyncGenerator[Mapping[AuthScheme, Transport], None]:
    """Open one transport per bound scheme for the lifetime of a run."""
    async with AsyncExitStack() as stack:
        transports: dict[AuthScheme, Transport] = {}
        for scheme, config in auth.configs.items():
            transports[scheme] = await stack.enter_async_context(
                AiohttpTransport.from_config(config)
            )
        yield transports
