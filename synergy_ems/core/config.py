import os
import logging
from pydantic import BaseModel, Field
from typing import List
from dotenv import load_dotenv

load_dotenv()

class AuthSettings(BaseModel):
    # Tokens are issued by the external identity provider; we only verify them.
    jwt_secret: str = Field(default=os.getenv("AUTH_JWT_SECRET", "dev-only-insecure-jwt-secret"))
    jwt_audience: str = Field(default=os.getenv("AUTH_JWT_AUDIENCE", "authenticated"))
    jwt_algorithm: str = "HS256"

class Config(BaseModel):
    app_name: str = "Synergy EMS Leave Service"
    environment: str = os.getenv("APP_ENV", "development")
    api_prefix: str = "/api"

    # Database
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./database.db")

    # Auth
    auth: AuthSettings = AuthSettings()

    version: str = "1.0.0"
    request_id_header: str = "X-Request-ID"

    # CORS: comma-separated origins loaded from env.
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            o.strip()
            for o in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://127.0.0.1:5173,"
                "http://localhost:3000,http://127.0.0.1:3000",
            ).split(",")
            if o.strip()
        ]
    )

    rate_limit_per_minute: int = int(os.getenv("RATE_LIMIT_PER_MINUTE", "60"))
    default_page_limit: int = int(os.getenv("DEFAULT_PAGE_LIMIT", "50"))

settings = Config()

# --- Startup Validation for Production ---
_logger = logging.getLogger(__name__)
if settings.environment not in ("development", "testing"):
    if "dev-only" in settings.auth.jwt_secret:
        raise RuntimeError(
            "FATAL: AUTH_JWT_SECRET must be set for non-development environments. "
            "Set it as an environment variable."
        )
elif "dev-only" in settings.auth.jwt_secret:
    _logger.warning("Using insecure default AUTH_JWT_SECRET, only acceptable in development.")
