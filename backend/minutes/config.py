# minutes/config.py
import os
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings(BaseModel):
    # General app settings
    APP_NAME: str = "Meeting Minutes API"
    env: str = os.getenv("ENV", "dev")
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Host & Port settings
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "8000"))

    # CORS origins for frontend (comma separated in CORS_ORIGINS)
    CORS_ORIGINS: list[str] = _env_list(
        "CORS_ORIGINS",
        "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173",
    )

    # Uploaded audio
    upload_dir: str = os.getenv("UPLOAD_DIR", "./uploads")
    max_file_size_mb: int = int(os.getenv("MAX_FILE_SIZE_MB", "100"))

    # AssemblyAI (transcription)
    assemblyai_base_url: str = os.getenv("ASSEMBLYAI_BASE_URL", "https://api.assemblyai.com")
    transcription_poll_interval: float = float(os.getenv("TRANSCRIPTION_POLL_INTERVAL", "3"))
    # Upper bound for a single transcription job; the provider has no timeout of its own
    transcription_max_wait: float = float(os.getenv("TRANSCRIPTION_MAX_WAIT", "3600"))
    transcription_http_timeout: float = float(os.getenv("TRANSCRIPTION_HTTP_TIMEOUT", "120"))

    # Gemini (analysis)
    gemini_base_url: str = os.getenv("GEMINI_BASE_URL", "https://generativelanguage.googleapis.com")
    gemini_model: str = os.getenv("GEMINI_MODEL", "gemini-3-flash-preview")
    gemini_http_timeout: float = float(os.getenv("GEMINI_HTTP_TIMEOUT", "300"))

    # Rate limiting: "memory" for a single instance, "redis" when several share the load
    rate_limit_backend: str = os.getenv("RATE_LIMIT_BACKEND", "memory")
    redis_url: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")

    @property
    def max_file_size_bytes(self) -> int:
        return self.max_file_size_mb * 1024 * 1024


settings = Settings()  # Instantiate configuration
