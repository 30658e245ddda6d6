"""
Settings Store

Deployment-wide storage for third-party API keys, encrypted at rest.
A missing key is a normal state ("not configured"), never an exception.
"""
import logging
from typing import List, Optional, TypedDict

from minutes.core.security import InvalidToken, decrypt, encrypt, mask_api_key, MASK
from minutes.models.setting import API_KEY_DISPLAY_NAMES, ApiKey, Setting

logger = logging.getLogger(__name__)


class ApiKeyInfo(TypedDict):
    key: str
    displayName: str
    maskedValue: Optional[str]
    isConfigured: bool


async def get_api_key(key: ApiKey) -> Optional[str]:
    """Return the decrypted key, or None when absent or unreadable."""
    setting = await Setting.get_or_none(key=key.value)
    if setting is None:
        return None
    try:
        return decrypt(setting.value)
    except InvalidToken:
        # Usually means ENCRYPTION_KEY changed since the value was stored
        logger.error("Failed to decrypt API key %s", key.value)
        return None


async def set_api_key(key: ApiKey, value: str) -> None:
    encrypted = encrypt(value)
    setting = await Setting.get_or_none(key=key.value)
    if setting is None:
        await Setting.create(key=key.value, value=encrypted)
    else:
        setting.value = encrypted
        await setting.save()


async def delete_api_key(key: ApiKey) -> None:
    # Deleting an absent key is fine
    await Setting.filter(key=key.value).delete()


async def get_all_api_keys() -> List[ApiKeyInfo]:
    """Masked view of every credential slot, for the settings page."""
    rows = await Setting.filter(key__in=[k.value for k in ApiKey])
    stored = {row.key: row.value for row in rows}

    infos: List[ApiKeyInfo] = []
    for key in ApiKey:
        encrypted = stored.get(key.value)
        masked = None
        if encrypted:
            try:
                masked = mask_api_key(decrypt(encrypted))
            except InvalidToken:
                masked = MASK
        infos.append({
            "key": key.value,
            "displayName": API_KEY_DISPLAY_NAMES[key],
            "maskedValue": masked,
            "isConfigured": bool(encrypted),
        })
    return infos
