"""Application configuration via environment variables."""

from pathlib import Path
from pydantic_settings import BaseSettings

PROJECT_ROOT = Path(__file__).resolve().parent.parent


class Settings(BaseSettings):
    database_url: str = f"sqlite:///{PROJECT_ROOT / 'otp_auth.db'}"
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:5173"]

    # Session tokens
    secret: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    token_ttl_seconds: int = 86400  # 24 hours

    # One-time codes
    otp_expiry_seconds: int = 600  # 0 disables expiry
    otp_hash_rounds: int = 10  # bcrypt cost factor
    otp_resend_cooldown_seconds: int = 0  # 0 disables throttling

    # Request sanitization
    sanitize_max_depth: int = 32

    # Email (SMTP)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    mail_from: str = ""

    model_config = {"env_prefix": "OA_", "env_file": ".env", "frozen": True}


settings = Settings()
