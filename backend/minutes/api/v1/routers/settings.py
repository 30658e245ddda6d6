# minutes/api/v1/routers/settings.py
from fastapi import APIRouter, Depends, HTTPException, status

from minutes.api.v1.deps import get_current_user, require_admin
from minutes.models.setting import ApiKey
from minutes.models.user import User
from minutes.schemas.settings import ApiKeyDelete, ApiKeyIn
from minutes.services import settings_store

router = APIRouter(prefix="/settings", tags=["settings"])

def _parse_key(raw: str) -> ApiKey:
    try:
        return ApiKey(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid key type")

@router.get("", response_model=dict)
async def list_api_keys(user: User = Depends(get_current_user)):
    """Every credential slot with a masked value; plain keys never leave the server."""
    return {"success": True, "data": {"apiKeys": await settings_store.get_all_api_keys()}}

@router.post("", response_model=dict)
async def save_api_key(body: ApiKeyIn, admin: User = Depends(require_admin)):
    """
    Store (or replace) a deployment-wide API key. Admin only, since the key
    is used for every user's meetings.
    """
    key = _parse_key(body.key)
    value = body.value.strip()
    if not value:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Key and value are required")
    await settings_store.set_api_key(key, value)
    return {"success": True}

@router.delete("", response_model=dict)
async def remove_api_key(body: ApiKeyDelete, admin: User = Depends(require_admin)):
    await settings_store.delete_api_key(_parse_key(body.key))
    return {"success": True}
