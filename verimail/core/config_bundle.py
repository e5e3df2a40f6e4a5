"""Config Bundles - ordered merge and typed validation of resolved configuration.

Invariants:
    - merge_bundle is order-preserving: later entries override fields of earlier ones
    - Only mapping values take part in a merge (one level, no deep merge)
    - validate_bundle checks presence of every required key first, then whitelists,
      then types; a missing key is never replaced by a default

Design Decisions:
    - One pydantic schema per flow: the single validation boundary reports every
      missing field at once (data.keys) while data.key keeps the first one
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from verimail.core.domain_types import ExpiresIn
from verimail.core.errors import (
    InvalidConfigValueError, InvalidExpiresInError, MissingConfigKeyError,
)

ConfigBundle = dict[str, Any]


@dataclass(frozen=True)
class ConfigLookup:
    """Resolution result for one named config entry."""
    key: str
    exists: bool
    value: Any = None

    @classmethod
    def from_mapping(cls, key: str, raw: Mapping[str, Any] | None) -> "ConfigLookup":
        if not raw:
            return cls(key=key, exists=False)
        return cls(
            key=raw.get("key", key),
            exists=bool(raw.get("exists", False)),
            value=raw.get("value"),
        )


def merge_bundle(lookups: Iterable[ConfigLookup]) -> ConfigBundle:
    """Union mapping-valued lookups in iteration order."""
    bundle: ConfigBundle = {}
    for lookup in lookups:
        if lookup.exists and isinstance(lookup.value, Mapping):
            bundle.update(lookup.value)
    return bundle


def bundle_from_value(value: Any) -> ConfigBundle:
    """A single config value as a bundle; non-mappings contribute nothing."""
    if isinstance(value, Mapping):
        return dict(value)
    return {}


# ─── Flow Schemas ────────────────────────────────────────────────

class FlowConfig(BaseModel):
    """Base for per-flow config schemas. Field order is the report order."""
    model_config = ConfigDict(extra="ignore", frozen=True)

    @classmethod
    def required_keys(cls) -> list[str]:
        return [
            field.alias or name for name, field in cls.model_fields.items()
        ]

    @classmethod
    def check_whitelists(cls, bundle: ConfigBundle) -> None:
        """Hook for value whitelists checked before type validation."""


class SmtpTemplateConfig(FlowConfig):
    """EMAIL_CONFIG merged with EMAIL_CONFIG_TEMPLATE_<key>."""
    smtp_host: str
    smtp_port: int
    smtp_secure: bool
    smtp_user: str
    smtp_pass: str
    smtp_from: str
    smtp_name: str
    template: str
    subject: str


class SigningConfig(FlowConfig):
    """The part of EMAIL_VERIFICATION_CONFIG needed to check a token."""
    email_jwt_secret: str


class VerificationConfig(FlowConfig):
    """EMAIL_VERIFICATION_CONFIG as needed to issue a token."""
    model_config = ConfigDict(extra="ignore", frozen=True, populate_by_name=True)

    email_verification_template: str
    email_jwt_secret: str
    email_jwt_expires_in: ExpiresIn = Field(alias="email_jwt_expiresIn")

    @classmethod
    def check_whitelists(cls, bundle: ConfigBundle) -> None:
        value = bundle["email_jwt_expiresIn"]
        if value not in ExpiresIn.literals():
            raise InvalidExpiresInError(value, ExpiresIn.literals())


FlowConfigT = TypeVar("FlowConfigT", bound=FlowConfig)


def missing_keys(bundle: ConfigBundle, required: Iterable[str]) -> list[str]:
    return [key for key in required if key not in bundle]


def validate_bundle(bundle: ConfigBundle, schema: type[FlowConfigT]) -> FlowConfigT:
    """Validate a merged bundle against a flow schema.

    Raises MissingConfigKeyError, the schema's whitelist errors, or
    InvalidConfigValueError, in that order.
    """
    missing = missing_keys(bundle, schema.required_keys())
    if missing:
        raise MissingConfigKeyError(missing)
    schema.check_whitelists(bundle)
    try:
        return schema.model_validate(bundle)
    except ValidationError as e:
        keys: list[str] = []
        for err in e.errors():
            key = str(err["loc"][0]) if err["loc"] else ""
            if key and key not in keys:
                keys.append(key)
        raise InvalidConfigValueError(keys)
