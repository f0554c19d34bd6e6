"""Resolution of the authentication mode for a validation run."""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Literal

from omnichat_validator.models.config import TransportConfig, ValidatorConfig
from omnichat_validator.models.spec import AuthScheme

log = logging.getLogger(__name__)

type AuthMode = Literal["none", "clerk", "jwt", "both"]

SCHEME_LABELS: Mapping[AuthScheme, str] = {
    "clerk": "Clerk",
    "jwt": "JWT",
}

CREDENTIAL_FLAGS: Mapping[AuthScheme, str] = {
    "clerk": "--clerk",
    "jwt": "--bearer",
}

AUTH_STATUS: Mapping[AuthMode, str] = {
    "both": "Clerk + JWT tokens provided",
    "clerk": "Clerk token only",
    "jwt": "JWT token only",
    "none": "No authentication",
}


@dataclass(frozen=True, kw_only=True)
class AuthResolution:
    """Which schemes are bound for a run and the transport settings for each.

    ``configs`` always holds an unauthenticated ``"none"`` entry.
    """

    mode: AuthMode
    configs: Mapping[AuthScheme, TransportConfig]

    def is_bound(self, scheme: AuthScheme) -> bool:
        """Whether a credential for the scheme was supplied."""
        return scheme != "none" and scheme in self.configs

    def scheme_for(self, required: AuthScheme) -> AuthScheme:
        """Scheme whose transport serves a spec with the given requirement.

        Falls back to the unauthenticated transport when the required
        credential was not supplied; the server then answers 401/403.
        """
        if required == "none" or not self.is_bound(required):
            return "none"
        return required

    @property
    def status(self) -> str:
        """Human readable description of the mode."""
        return AUTH_STATUS[self.mode]


def resolve_auth(config: ValidatorConfig) -> AuthResolution:
    """Derive the auth mode and per-scheme transport settings from the config."""
    configs: dict[AuthScheme, TransportConfig] = {
        "none": TransportConfig(base_url=config.base_url, timeout=config.timeout)
    }
    if config.clerk_token is not None:
        configs["clerk"] = TransportConfig(
            base_url=config.base_url,
            timeout=config.timeout,
            token=config.clerk_token,
        )
    if config.bearer_token is not None:
        configs["jwt"] = TransportConfig(
            base_url=config.base_url,
            timeout=config.timeout,
            token=config.bearer_token,
        )

    mode: AuthMode
    if "clerk" in configs and "jwt" in configs:
        mode = "both"
    elif "clerk" in configs:
        mode = "clerk"
    elif "jwt" in configs:
        mode = "jwt"
    else:
        mode = "none"

    log.debug("Resolved auth mode %s", mode)
    return AuthResolution(mode=mode, configs=configs)
