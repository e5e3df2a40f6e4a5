"""Config Bundles - ordered merge and per-flow validation.

Tests cover:
    - Later entries override earlier fields; non-mapping values ignored
    - Missing keys reported first-in-order plus the full list
    - Expiry whitelist checked after presence, before type validation
"""

import pytest

from verimail.core.config_bundle import (
    ConfigLookup, SigningConfig, SmtpTemplateConfig, VerificationConfig,
    bundle_from_value, merge_bundle, validate_bundle,
)
from verimail.core.domain_types import ExpiresIn
from verimail.core.errors import (
    InvalidConfigValueError, InvalidExpiresInError, MissingConfigKeyError,
)


def test_merge_later_entry_overrides_earlier_fields():
    bundle = merge_bundle([
        ConfigLookup("A", True, {"subject": "generic", "smtp_host": "h"}),
        ConfigLookup("B", True, {"subject": "specific"}),
    ])
    assert bundle == {"subject": "specific", "smtp_host": "h"}


def test_merge_ignores_non_mapping_and_missing_values():
    bundle = merge_bundle([
        ConfigLookup("A", True, "just a string"),
        ConfigLookup("B", False, {"ignored": True}),
        ConfigLookup("C", True, {"kept": 1}),
    ])
    assert bundle == {"kept": 1}


def test_merge_is_shallow():
    bundle = merge_bundle([
        ConfigLookup("A", True, {"nested": {"a": 1, "b": 2}}),
        ConfigLookup("B", True, {"nested": {"a": 9}}),
    ])
    assert bundle == {"nested": {"a": 9}}


def test_bundle_from_value_drops_non_mappings():
    assert bundle_from_value(None) == {}
    assert bundle_from_value(["x"]) == {}
    assert bundle_from_value({"a": 1}) == {"a": 1}


@pytest.mark.parametrize("missing", SmtpTemplateConfig.required_keys())
def test_single_missing_smtp_key_is_named(email_config, welcome_template_config, missing):
    bundle = {**email_config, **welcome_template_config}
    bundle.pop(missing)
    with pytest.raises(MissingConfigKeyError) as exc:
        validate_bundle(bundle, SmtpTemplateConfig)
    assert exc.value.to_response() == {
        "code": 400,
        "i18n": "NEED_KEY_IN_CONFIGS",
        "data": {"key": missing, "keys": [missing]},
    }


def test_every_missing_key_reported_in_declared_order():
    with pytest.raises(MissingConfigKeyError) as exc:
        validate_bundle({"smtp_host": "h", "subject": "s"}, SmtpTemplateConfig)
    assert exc.value.missing == [
        "smtp_port", "smtp_secure", "smtp_user", "smtp_pass",
        "smtp_from", "smtp_name", "template",
    ]
    assert exc.value.data["key"] == "smtp_port"


def test_present_null_key_is_not_missing_but_invalid(email_config, welcome_template_config):
    bundle = {**email_config, **welcome_template_config, "smtp_port": None}
    with pytest.raises(InvalidConfigValueError) as exc:
        validate_bundle(bundle, SmtpTemplateConfig)
    assert exc.value.keys == ["smtp_port"]


def test_smtp_values_are_coerced(email_config, welcome_template_config):
    bundle = {**email_config, **welcome_template_config, "smtp_port": "465", "smtp_secure": "true"}
    config = validate_bundle(bundle, SmtpTemplateConfig)
    assert config.smtp_port == 465
    assert config.smtp_secure is True
    assert config.subject == "Welcome"


def test_verification_config_parses_expiry(verification_config):
    config = validate_bundle(verification_config, VerificationConfig)
    assert config.email_jwt_expires_in is ExpiresIn.ONE_HOUR
    assert config.email_verification_template == "verify"


@pytest.mark.parametrize("value", ["30m", "24h", "1H", "", 3600, None])
def test_expiry_outside_whitelist_rejected(verification_config, value):
    bundle = {**verification_config, "email_jwt_expiresIn": value}
    with pytest.raises(InvalidExpiresInError) as exc:
        validate_bundle(bundle, VerificationConfig)
    assert exc.value.i18n == "NEED_VALID_EXPIRES_IN"
    assert exc.value.data == {
        "valid": ["1h", "2h", "3h", "6h", "12h", "1d"],
        "value": value,
    }


def test_missing_key_reported_before_whitelist(verification_config):
    bundle = {**verification_config, "email_jwt_expiresIn": "30m"}
    bundle.pop("email_jwt_secret")
    with pytest.raises(MissingConfigKeyError) as exc:
        validate_bundle(bundle, VerificationConfig)
    assert exc.value.data["key"] == "email_jwt_secret"


def test_verification_required_keys_order():
    assert VerificationConfig.required_keys() == [
        "email_verification_template", "email_jwt_secret", "email_jwt_expiresIn",
    ]


def test_signing_config_only_needs_secret():
    config = validate_bundle({"email_jwt_secret": "k"}, SigningConfig)
    assert config.email_jwt_secret == "k"
    with pytest.raises(MissingConfigKeyError):
        validate_bundle({}, SigningConfig)
