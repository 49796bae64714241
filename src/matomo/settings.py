"""Settings for the Matomo request transform.

The host hands over an opaque string-to-string mapping. It is validated
once here into an immutable ``Settings`` value so the transform itself
never has to look at raw configuration.
"""

import os
from collections.abc import Mapping
from enum import Enum
from urllib.parse import urlsplit

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from src.matomo.errors import ConfigurationError

# Environment defaults used by the collector service and CLI
ENV_KEYS = {
    "site_id": "MATOMO_SITE_ID",
    "endpoint_url": "MATOMO_ENDPOINT_URL",
    "authentication_token": "MATOMO_AUTH_TOKEN",
    "transport": "MATOMO_TRANSPORT",
}


class Transport(str, Enum):
    QUERY = "query"  # GET, params in the URL, client headers forwarded
    FORM = "form"  # POST, params in a form-encoded body, fixed headers


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    site_id: str
    endpoint_url: str
    token_auth: str | None = None
    transport: Transport = Transport.QUERY

    @field_validator("site_id")
    @classmethod
    def site_id_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("site_id must not be empty")
        return v.strip()

    @field_validator("endpoint_url")
    @classmethod
    def endpoint_is_http(cls, v: str) -> str:
        v = v.strip()
        parts = urlsplit(v)
        if parts.scheme not in ("http", "https") or not parts.netloc:
            raise ValueError("endpoint_url must be an http(s) URL")
        return v

    @field_validator("token_auth")
    @classmethod
    def blank_token_is_none(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return v

    @property
    def include_location(self) -> bool:
        """Privacy gate: location is only sent as first-class fields when authenticated."""
        return self.token_auth is not None

    @classmethod
    def from_dict(cls, settings: Mapping[str, str]) -> "Settings":
        """Validate a host settings mapping, raising ConfigurationError on failure."""
        missing = [k for k in ("site_id", "endpoint_url") if not settings.get(k, "").strip()]
        if missing:
            raise ConfigurationError(f"missing required setting(s): {', '.join(missing)}")

        fields = {
            "site_id": settings["site_id"],
            "endpoint_url": settings["endpoint_url"],
            "token_auth": settings.get("authentication_token"),
        }
        if settings.get("transport"):
            fields["transport"] = settings["transport"].strip().lower()
        try:
            return cls(**fields)
        except ValidationError as e:
            reasons = "; ".join(f"{'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors())
            raise ConfigurationError(f"invalid settings: {reasons}") from e


def env_defaults(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Settings mapping built from MATOMO_* environment variables."""
    environ = os.environ if environ is None else environ
    return {key: environ[var] for key, var in ENV_KEYS.items() if environ.get(var)}
