# minutes/models/setting.py
from enum import Enum
from tortoise import fields, models


class ApiKey(str, Enum):
    """Credential slots understood by the settings store."""
    GEMINI = "GEMINI_API_KEY"
    ASSEMBLYAI = "ASSEMBLYAI_API_KEY"


API_KEY_DISPLAY_NAMES = {
    ApiKey.GEMINI: "Gemini API",
    ApiKey.ASSEMBLYAI: "AssemblyAI API",
}


class Setting(models.Model):
    """
    Deployment-wide key/value store for third-party credentials.
    ``value`` is always a Fernet token, never the plain secret.
    """
    key = fields.CharField(pk=True, max_length=64)  # ApiKey value
    value = fields.TextField()
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "settings"
