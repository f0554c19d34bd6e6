"""Models for endpoint test specifications."""

from collections.abc import Mapping
from typing import Literal

from pydantic import Field, model_validator

from omnichat_validator.models.base import Model
from omnichat_validator.models.requests import FileUpload, RequestBody

type AuthScheme = Literal["none", "clerk", "jwt"]
type HttpMethod = Literal["GET", "POST", "PUT", "PATCH", "DELETE"]
type ResponseSchema = Literal["models-catalogue"]


class TestSpec(Model):
    """Static description of one endpoint check."""

    __test__ = False

    name: str = Field(..., description="Display name, e.g. 'GET /api/config'")
    method: HttpMethod = Field(..., description="HTTP method")
    path: str = Field(..., description="Request path, placeholders already filled in")
    auth: AuthScheme = Field(default="none", description="Credential scheme required")
    request_body: RequestBody | None = Field(
        default=None, description="JSON body sent with the request"
    )
    upload: FileUpload | None = Field(
        default=None, description="Multipart upload sent with the request"
    )
    response_schema: ResponseSchema | None = Field(
        default=None, description="Structural check applied to 2xx responses"
    )
    expected_failures: Mapping[int, str] = Field(
        default_factory=dict,
        description="Explanations for status codes that are expected without real data",
    )

    @model_validator(mode="after")
    def _check_single_payload(self) -> "TestSpec":
        if self.request_body is not None and self.upload is not None:
            raise ValueError(f"{self.name}: request_body and upload are exclusive")
        if not self.path.startswith("/"):
            raise ValueError(f"{self.name}: path must start with '/'")
        return self
