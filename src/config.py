from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str = "postgresql://postgres:root@db:5432/esign-db"

    # Address that receives the company-side notifications and the final PDF
    COMPANY_EMAIL: Optional[str] = None
    FRONTEND_BASE_URL: str = "http://localhost:5173"

    # Email
    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_USE_SSL: bool = False
    EMAIL_SENDER: str = "noreply@esign.local"
    EMAIL_SENDER_NAME: str = "E-Sign System"

    # Headless-browser render endpoint
    RENDERER_URL: str = "http://renderer:3000/pdf"
    RENDER_TIMEOUT_SECONDS: float = 60.0

    # External signing authority (mutual TLS)
    SIGNER_ENABLED: bool = False
    SIGNER_URL: Optional[str] = None
    SIGNER_CLIENT_CERT: Optional[str] = None
    SIGNER_CLIENT_KEY: Optional[str] = None
    SIGNER_CA_BUNDLE: Optional[str] = None
    SIGNER_TIMEOUT_SECONDS: float = 60.0

    FINALIZE_RETRY_MINUTES: int = 15
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
