"""The fixed catalogue of OmniChat endpoint checks, in execution order."""

from collections.abc import Sequence

from omnichat_validator.models.requests import (
    AppleAuthRequest,
    AppleUserData,
    AppleUserName,
    ChatMessage,
    ChatRequest,
    CheckoutRequest,
    ConversationRequest,
    ConversationUpdateRequest,
    FileUpload,
    MessageRequest,
    PortalRequest,
    RefreshTokenRequest,
    UserProfileUpdate,
    V1MessageRequest,
)
from omnichat_validator.models.spec import TestSpec

# Size of the full OmniChat API surface; coverage is reported against it.
KNOWN_ENDPOINT_COUNT = 43

TEST_CONVERSATION_ID = "test-id"
TEST_FILE_KEY = "test-key"
TEST_MODEL = "gpt-4o-mini"
BILLING_RETURN_URL = "http://localhost:3000/billing"

PUBLIC_ENDPOINTS: Sequence[TestSpec] = (
    TestSpec(name="GET /api/config", method="GET", path="/api/config"),
    TestSpec(name="GET /api/openapi.json", method="GET", path="/api/openapi.json"),
    TestSpec(name="GET /api/v1/docs", method="GET", path="/api/v1/docs"),
)

AUTH_ENDPOINTS: Sequence[TestSpec] = (
    TestSpec(
        name="POST /api/v1/auth/apple",
        method="POST",
        path="/api/v1/auth/apple",
        request_body=AppleAuthRequest(
            id_token="mock-apple-jwt-token",
            user=AppleUserData(
                email="test@example.com",
                name=AppleUserName(first_name="Test", last_name="User"),
            ),
        ),
        expected_failures={400: "Expected: Requires valid Apple ID token"},
    ),
    TestSpec(
        name="POST /api/v1/auth/refresh",
        method="POST",
        path="/api/v1/auth/refresh",
        request_body=RefreshTokenRequest(refresh_token="mock-refresh-token"),
        expected_failures={401: "Expected: Requires valid refresh token"},
    ),
)

CLERK_ENDPOINTS: Sequence[TestSpec] = (
    TestSpec(
        name="POST /api/chat",
        method="POST",
        path="/api/chat",
        auth="clerk",
        request_body=ChatRequest(
            messages=[ChatMessage(role="user", content="Hello, this is a test message")],
            model=TEST_MODEL,
            conversation_id="test-conversation",
            stream=False,
        ),
    ),
    TestSpec(
        name="GET /api/models",
        method="GET",
        path="/api/models",
        auth="clerk",
        response_schema="models-catalogue",
    ),
    TestSpec(
        name="GET /api/conversations",
        method="GET",
        path="/api/conversations",
        auth="clerk",
    ),
    TestSpec(
        name="POST /api/conversations",
        method="POST",
        path="/api/conversations",
        auth="clerk",
        request_body=ConversationRequest(title="Test Conversation", model=TEST_MODEL),
    ),
    TestSpec(
        name="DELETE /api/conversations/{id}",
        method="DELETE",
        path=f"/api/conversations/{TEST_CONVERSATION_ID}",
        auth="clerk",
    ),
    TestSpec(
        name="GET /api/conversations/{id}/messages",
        method="GET",
        path=f"/api/conversations/{TEST_CONVERSATION_ID}/messages",
        auth="clerk",
    ),
    TestSpec(
        name="POST /api/conversations/{id}/messages",
        method="POST",
        path=f"/api/conversations/{TEST_CONVERSATION_ID}/messages",
        auth="clerk",
        request_body=MessageRequest(role="user", content="Test message", model=TEST_MODEL),
    ),
    TestSpec(
        name="POST /api/upload (multipart)",
        method="POST",
        path="/api/upload",
        auth="clerk",
        upload=FileUpload(
            filename="test.txt",
            content=b"test file content",
            fields={"conversationId": TEST_CONVERSATION_ID},
        ),
    ),
    TestSpec(
        name="GET /api/upload?key=test",
        method="GET",
        path="/api/upload?key=test",
        auth="clerk",
    ),
    TestSpec(
        name="GET /api/search?q=test",
        method="GET",
        path="/api/search?q=test",
        auth="clerk",
    ),
    TestSpec(name="GET /api/battery", method="GET", path="/api/battery", auth="clerk"),
    TestSpec(
        name="GET /api/user/tier", method="GET", path="/api/user/tier", auth="clerk"
    ),
    TestSpec(
        name="POST /api/stripe/checkout",
        method="POST",
        path="/api/stripe/checkout",
        auth="clerk",
        request_body=CheckoutRequest(
            type="subscription", plan_id="monthly", return_url=BILLING_RETURN_URL
        ),
    ),
    TestSpec(
        name="GET /api/stripe/checkout",
        method="GET",
        path="/api/stripe/checkout",
        auth="clerk",
    ),
    TestSpec(
        name="POST /api/stripe/portal",
        method="POST",
        path="/api/stripe/portal",
        auth="clerk",
        request_body=PortalRequest(return_url=BILLING_RETURN_URL),
    ),
)

JWT_ENDPOINTS: Sequence[TestSpec] = (
    TestSpec(
        name="GET /api/v1/conversations",
        method="GET",
        path="/api/v1/conversations",
        auth="jwt",
    ),
    TestSpec(
        name="POST /api/v1/conversations",
        method="POST",
        path="/api/v1/conversations",
        auth="jwt",
        request_body=ConversationRequest(title="Test V1 Conversation", model=TEST_MODEL),
    ),
    TestSpec(
        name="GET /api/v1/conversations/{id}",
        method="GET",
        path=f"/api/v1/conversations/{TEST_CONVERSATION_ID}",
        auth="jwt",
    ),
    TestSpec(
        name="PATCH /api/v1/conversations/{id}",
        method="PATCH",
        path=f"/api/v1/conversations/{TEST_CONVERSATION_ID}",
        auth="jwt",
        request_body=ConversationUpdateRequest(title="Updated Title", is_archived=True),
    ),
    TestSpec(
        name="DELETE /api/v1/conversations/{id}",
        method="DELETE",
        path=f"/api/v1/conversations/{TEST_CONVERSATION_ID}",
        auth="jwt",
    ),
    TestSpec(
        name="GET /api/v1/conversations/{id}/messages",
        method="GET",
        path=f"/api/v1/conversations/{TEST_CONVERSATION_ID}/messages",
        auth="jwt",
    ),
    TestSpec(
        name="POST /api/v1/conversations/{id}/messages",
        method="POST",
        path=f"/api/v1/conversations/{TEST_CONVERSATION_ID}/messages",
        auth="jwt",
        request_body=V1MessageRequest(content="Test V1 message", stream=False),
    ),
    TestSpec(
        name="GET /api/v1/user/profile",
        method="GET",
        path="/api/v1/user/profile",
        auth="jwt",
    ),
    TestSpec(
        name="PATCH /api/v1/user/profile",
        method="PATCH",
        path="/api/v1/user/profile",
        auth="jwt",
        request_body=UserProfileUpdate(name="Updated Test User"),
    ),
    TestSpec(
        name="GET /api/v1/user/usage",
        method="GET",
        path="/api/v1/user/usage",
        auth="jwt",
    ),
    TestSpec(
        name="POST /api/v1/upload (multipart)",
        method="POST",
        path="/api/v1/upload",
        auth="jwt",
        upload=FileUpload(
            filename="test-v1.txt",
            content=b"test v1 file content",
            fields={"conversationId": TEST_CONVERSATION_ID},
        ),
    ),
    TestSpec(
        name="GET /api/v1/files/{key}",
        method="GET",
        path=f"/api/v1/files/{TEST_FILE_KEY}",
        auth="jwt",
    ),
)

ENDPOINT_CATALOGUE: Sequence[TestSpec] = (
    *PUBLIC_ENDPOINTS,
    *AUTH_ENDPOINTS,
    *CLERK_ENDPOINTS,
    *JWT_ENDPOINTS,
)


def find_spec(name: str, catalogue: Sequence[TestSpec] = ENDPOINT_CATALOGUE) -> TestSpec:
    """Look up a catalogue entry by its display name.

    Raises:
        KeyError: If no entry has the given name

    """
    for spec in catalogue:
        if spec.name == name:
            return spec
    raise KeyError(name)
