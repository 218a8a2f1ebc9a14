# bookmarket/config.py
"""Settings loaded from the environment (optionally seeded from `.env`)."""
import os
from dataclasses import dataclass
from dotenv import load_dotenv

from .exceptions import ConfigurationError

SESSION_MAX_AGE = 60 * 60 * 24  # 24 hours


@dataclass
class Settings:
    """Application settings. Required values must be non-empty."""

    database_url: str
    session_secret: str
    imgur_client_id: str

    imgur_api_url: str = "https://api.imgur.com/3"
    environment: str = "development"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    bcrypt_rounds: int = 14
    login_failure_delay: float = 1.0

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() == "production"

    @classmethod
    def load(cls, env_path: str | None = None) -> "Settings":
        """Load settings from the process environment."""
        if env_path:
            load_dotenv(env_path)
        else:
            load_dotenv()

        database_url = os.getenv("DATABASE_URL", "")
        # SQLAlchemy 2.x doesn't accept 'postgres://'
        if database_url.startswith("postgres://"):
            database_url = database_url.replace("postgres://", "postgresql+psycopg2://", 1)

        return cls(
            database_url=database_url,
            session_secret=os.getenv("SESSION_SECRET", ""),
            imgur_client_id=os.getenv("IMGUR_CLIENT_ID", ""),
            imgur_api_url=os.getenv("IMGUR_API_URL", "https://api.imgur.com/3"),
            environment=os.getenv("ENVIRONMENT", "development"),
            db_pool_size=int(os.getenv("DB_POOL_SIZE", 5)),
            db_max_overflow=int(os.getenv("DB_MAX_OVERFLOW", 10)),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", 14)),
            login_failure_delay=float(os.getenv("LOGIN_FAILURE_DELAY", 1.0)),
        )

    def validate(self) -> list[str]:
        """Validate settings and return list of errors."""
        errors = []
        if not self.database_url:
            errors.append("DATABASE_URL is required")
        if not self.session_secret:
            errors.append("SESSION_SECRET is required")
        if not self.imgur_client_id:
            errors.append("IMGUR_CLIENT_ID is required")
        return errors

    def require_valid(self) -> "Settings":
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))
        return self
