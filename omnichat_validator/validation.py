"""Structural validation of response bodies beyond the HTTP status."""

import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from omnichat_validator.json_types import JsonKind, check_field, is_kind
from omnichat_validator.models.result import TestResult
from omnichat_validator.models.spec import ResponseSchema

log = logging.getLogger(__name__)

REQUIRED_MODEL_FIELDS: Sequence[tuple[str, JsonKind]] = (
    ("id", JsonKind.STRING),
    ("name", JsonKind.STRING),
    ("provider", JsonKind.STRING),
    ("contextWindow", JsonKind.NUMBER),
    ("maxOutput", JsonKind.NUMBER),
)

OPTIONAL_CAPABILITY_FIELDS: Sequence[str] = (
    "supportsVision",
    "supportsTools",
    "supportsWebSearch",
    "supportsImageGeneration",
)

type ResponseValidator = Callable[[Any], Sequence[str]]


def validate_models_response(
    response: Any, *, strict_provider_match: bool = True
) -> Sequence[str]:
    """Validate the body of GET /api/models.

    The expected shape is ``{"providers": {name: [model, ...]}}``. Problems
    with the envelope stop validation; problems inside providers and models
    are collected and validation carries on.

    Args:
        response: Decoded response body
        strict_provider_match: Report models whose ``provider`` differs from
            the key they are listed under

    Returns:
        Validation errors ordered by provider, model index, then field

    """
    if not is_kind(response, JsonKind.OBJECT):
        return ["Response is not a JSON object"]
    if "providers" not in response:
        return ["Missing 'providers' field"]

    providers = response["providers"]
    if not is_kind(providers, JsonKind.OBJECT):
        return ["'providers' field is not an object"]
    if not providers:
        return ["No providers found"]

    errors: list[str] = []
    for provider_name, models in providers.items():
        errors.extend(
            _validate_provider(provider_name, models, strict_provider_match)
        )
    return errors


def _validate_provider(
    provider_name: str, models: Any, strict_provider_match: bool
) -> Sequence[str]:
    if not is_kind(models, JsonKind.ARRAY):
        return [f"Provider '{provider_name}' models is not an array"]
    if not models:
        return [f"Provider '{provider_name}' has no models"]

    errors: list[str] = []
    for index, model in enumerate(models):
        prefix = f"Provider '{provider_name}' model[{index}]"
        if not is_kind(model, JsonKind.OBJECT):
            errors.append(f"{prefix} is not an object")
            continue

        for field, kind in REQUIRED_MODEL_FIELDS:
            if (problem := check_field(model, field, kind)) is not None:
                errors.append(f"{prefix} {problem}")

        for field in OPTIONAL_CAPABILITY_FIELDS:
            problem = check_field(model, field, JsonKind.BOOLEAN, required=False)
            if problem is not None:
                errors.append(f"{prefix} {problem}")

        declared = model.get("provider")
        if (
            strict_provider_match
            and is_kind(declared, JsonKind.STRING)
            and declared != provider_name
        ):
            errors.append(
                f"{prefix} provider '{declared}' does not match '{provider_name}'"
            )
    return errors


def get_response_validator(
    schema: ResponseSchema, *, strict_provider_match: bool = True
) -> ResponseValidator:
    """Return the validator for a named response schema."""
    validators: Mapping[ResponseSchema, ResponseValidator] = {
        "models-catalogue": lambda body: validate_models_response(
            body, strict_provider_match=strict_provider_match
        ),
    }
    return validators[schema]


def apply_validation_errors(result: TestResult, errors: Sequence[str]) -> TestResult:
    """Downgrade a result when its body failed structural validation.

    A 2xx response with a broken body is still a contract violation, so the
    result becomes a failure carrying every error, one per line.
    """
    if not errors:
        return result

    log.debug("%s failed validation with %d error(s)", result.name, len(errors))
    return replace(result, success=False, error_message="\n".join(errors))
