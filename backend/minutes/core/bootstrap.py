# minutes/core/bootstrap.py
"""
Startup tasks: make sure the upload directory exists and that there is an
administrator who can configure the AssemblyAI / Gemini keys.
"""
import os
import logging

from minutes.config import settings
from minutes.models.user import User
from minutes.core.security import hash_password

logger = logging.getLogger(__name__)


def ensure_upload_dir() -> str:
    os.makedirs(settings.upload_dir, exist_ok=True)
    return settings.upload_dir


async def ensure_default_admin() -> User | None:
    """
    Create the first admin from ADMIN_USERNAME / ADMIN_EMAIL / ADMIN_PASSWORD.

    Does nothing when an admin already exists or when ADMIN_PASSWORD is unset
    (no account with a default password is ever created). A taken username
    gets a numeric suffix.
    """
    if await User.filter(role="admin").exists():
        return None

    admin_password = os.getenv("ADMIN_PASSWORD")
    if not admin_password:
        logger.warning("[bootstrap] No admin present and ADMIN_PASSWORD not set; API keys can't be configured yet.")
        return None

    base_username = os.getenv("ADMIN_USERNAME", "admin")
    username, suffix = base_username, 1
    while await User.filter(username=username).exists():
        suffix += 1
        username = f"{base_username}{suffix}"

    admin = await User.create(
        username=username,
        email=os.getenv("ADMIN_EMAIL") or None,
        password_hash=hash_password(admin_password),
        role="admin",
    )
    logger.warning("[bootstrap] Created default admin -> username=%s id=%s", admin.username, admin.id)
    return admin
