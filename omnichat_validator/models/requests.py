"""Request bodies sent by the endpoint catalogue."""

from collections.abc import Sequence
from typing import Literal

from pydantic import Field

from omnichat_validator.models.base import Model, RequestBody


class AppleUserName(RequestBody):
    """Name shared by Apple on first sign in."""

    first_name: str | None = None
    last_name: str | None = None


class AppleUserData(RequestBody):
    """Optional user data returned by Sign in with Apple."""

    email: str | None = None
    name: AppleUserName | None = None


class AppleAuthRequest(RequestBody):
    """Body for POST /api/v1/auth/apple."""

    id_token: str
    user: AppleUserData | None = None


class RefreshTokenRequest(RequestBody):
    """Body for POST /api/v1/auth/refresh."""

    refresh_token: str


class ChatMessage(RequestBody):
    """Single chat message."""

    role: Literal["user", "assistant", "system"]
    content: str


class ChatRequest(RequestBody):
    """Body for POST /api/chat."""

    messages: Sequence[ChatMessage]
    model: str
    conversation_id: str | None = None
    stream: bool = False


class ConversationRequest(RequestBody):
    """Body for creating a conversation."""

    title: str
    model: str


class ConversationUpdateRequest(RequestBody):
    """Body for PATCH /api/v1/conversations/{id}."""

    title: str | None = None
    is_archived: bool | None = None


class MessageRequest(RequestBody):
    """Body for POST /api/conversations/{id}/messages."""

    role: Literal["user", "assistant", "system"]
    content: str
    model: str | None = None


class V1MessageRequest(RequestBody):
    """Body for POST /api/v1/conversations/{id}/messages."""

    content: str
    stream: bool = False


class UserProfileUpdate(RequestBody):
    """Body for PATCH /api/v1/user/profile."""

    name: str


class CheckoutRequest(RequestBody):
    """Body for POST /api/stripe/checkout."""

    type: Literal["subscription", "battery"]
    plan_id: str
    return_url: str


class PortalRequest(RequestBody):
    """Body for POST /api/stripe/portal."""

    return_url: str


class FileUpload(Model):
    """Multipart file upload sent instead of a JSON body."""

    field_name: str = Field(default="file", description="Form field for the file")
    filename: str = Field(..., description="Name reported for the uploaded file")
    content: bytes = Field(..., description="Raw file content")
    content_type: str = Field(default="text/plain", description="File MIME type")
    fields: dict[str, str] = Field(
        default_factory=dict, description="Extra form fields sent with the file"
    )
