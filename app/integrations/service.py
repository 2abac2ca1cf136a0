"""
Integration service layer.

Orchestrates per-user integration settings and provider calls:
- validate_settings: pure validation/normalization of a settings payload
- load_settings / save_settings: typed record <-> config store keys
- check_connection: probe candidate credentials
- relay_upload: forward an inbound file using the stored credentials

The config store only ever sees keys built from IntegrationProvider and
ConnectionSettingsField; nothing else in the codebase spells out key strings.
API keys are encrypted before they reach the store.
"""
from typing import BinaryIO, Optional

import httpx

from app.core.encryption import decrypt_credential, encrypt_credential, is_encrypted
from app.core.exceptions import ValidationError
from app.core.logging_config import log_info, log_warning
from app.integrations import chevereto
from app.integrations.schemas import ConnectionSettings, ProbeResult, RelayOutcome
from app.models.integration import ConnectionSettingsField, IntegrationProvider
from app.services.config_service import ConfigService

PROVIDER = IntegrationProvider.CHEVERETO

ENABLE_REQUIREMENTS_MESSAGE = "Domain and API Key are required to enable Chevereto"


def _key(field: ConnectionSettingsField) -> str:
    return PROVIDER.config_key(field.value)


# ================================================================================
# SETTINGS
# ================================================================================

def validate_settings(payload: ConnectionSettings) -> ConnectionSettings:
    """
    Normalize a settings payload and enforce the enable invariant.

    Trims domain and api_key, strips trailing slashes from domain; album_id is
    passed through. Idempotent.

    Raises:
        ValidationError: enabled is true but domain or api_key is blank.
    """
    domain = chevereto.normalize_domain(payload.domain)
    api_key = (payload.api_key or "").strip()

    if payload.enabled and (not domain or not api_key):
        raise ValidationError(ENABLE_REQUIREMENTS_MESSAGE)

    return ConnectionSettings(
        enabled=payload.enabled,
        domain=domain,
        api_key=api_key,
        album_id=payload.album_id,
    )


def _decode_api_key(user_id: str, stored: str) -> str:
    if not stored or not is_encrypted(stored):
        return stored
    try:
        return decrypt_credential(stored)
    except ValueError:
        log_warning("Stored Chevereto API key could not be decrypted; treating as unset", user_id=user_id)
        return ""


def load_settings(config: ConfigService, user_id: str) -> ConnectionSettings:
    """Read a user's settings; missing keys fall back to the defaults."""
    enabled, _ = config.get_bool(user_id, _key(ConnectionSettingsField.ENABLED))
    domain, _ = config.get_string(user_id, _key(ConnectionSettingsField.DOMAIN))
    stored_key, _ = config.get_string(user_id, _key(ConnectionSettingsField.API_KEY))
    album_id, _ = config.get_string(user_id, _key(ConnectionSettingsField.ALBUM_ID))

    return ConnectionSettings(
        enabled=enabled,
        domain=domain,
        api_key=_decode_api_key(user_id, stored_key),
        album_id=album_id,
    )


def save_settings(config: ConfigService, user_id: str, payload: ConnectionSettings) -> ConnectionSettings:
    """
    Validate, then persist all fields in one batch.

    Raises:
        ValidationError: payload violates the enable invariant
        ConfigStoreError: the batch write failed (nothing was changed)
    """
    normalized = validate_settings(payload)
    stored_key = encrypt_credential(normalized.api_key) if normalized.api_key else ""

    config.set_batch(user_id, {
        _key(ConnectionSettingsField.ENABLED): normalized.enabled,
        _key(ConnectionSettingsField.DOMAIN): normalized.domain,
        _key(ConnectionSettingsField.API_KEY): stored_key,
        _key(ConnectionSettingsField.ALBUM_ID): normalized.album_id,
    })
    log_info(
        "Saved Chevereto settings",
        user_id=user_id,
        enabled=normalized.enabled,
        domain=normalized.domain,
    )
    return normalized


# ================================================================================
# PROVIDER CALLS
# ================================================================================

async def check_connection(client: httpx.AsyncClient, domain: str, api_key: str) -> ProbeResult:
    """Probe candidate credentials. Raises ValidationError if either is blank."""
    return await chevereto.probe(client, domain, api_key)


async def relay_upload(
    config: ConfigService,
    client: httpx.AsyncClient,
    user_id: str,
    file: Optional[BinaryIO],
    filename: Optional[str],
) -> RelayOutcome:
    """
    Forward an inbound file to the user's Chevereto server.

    Preconditions are checked in order (enabled, configured, file present) and
    no network call is made unless all of them hold. Settings are re-read on
    every call, so a concurrent settings change may or may not be picked up.
    """
    current = load_settings(config, user_id)

    if not current.enabled:
        return RelayOutcome.failed("Chevereto is not enabled")

    domain = chevereto.normalize_domain(current.domain)
    api_key = current.api_key.strip()
    if not domain or not api_key:
        return RelayOutcome.failed("Chevereto domain and API key are not configured")

    if file is None or not filename:
        return RelayOutcome.failed("No file provided")

    return await chevereto.upload(
        client,
        domain=domain,
        api_key=api_key,
        file=file,
        filename=filename,
        album_id=current.album_id,
    )
