import os
from typing import Optional

from pydantic import BaseModel


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    secret_key: str = "dev-secret-key-change-me"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24

    admin_email: str = "admin@khemixall.com"
    admin_password: str = "admin"
    allow_demo_signin: bool = True

    # Simulated network latency, in seconds
    auth_delay: float = 1.0
    google_auth_delay: float = 1.5
    payment_delay: float = 2.0
    review_delay: float = 0.8

    tax_rate: float = 0.08
    strict_order_status: bool = True

    log_level: str = "INFO"
    database_url: Optional[str] = None
    database_name: Optional[str] = None

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            secret_key=os.getenv("SECRET_KEY", "dev-secret-key-change-me"),
            access_token_expire_minutes=int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24)),
            admin_email=os.getenv("ADMIN_EMAIL", "admin@khemixall.com"),
            admin_password=os.getenv("ADMIN_PASSWORD", "admin"),
            allow_demo_signin=_env_bool("ALLOW_DEMO_SIGNIN", True),
            auth_delay=float(os.getenv("AUTH_DELAY_SECONDS", 1.0)),
            google_auth_delay=float(os.getenv("GOOGLE_AUTH_DELAY_SECONDS", 1.5)),
            payment_delay=float(os.getenv("PAYMENT_DELAY_SECONDS", 2.0)),
            review_delay=float(os.getenv("REVIEW_DELAY_SECONDS", 0.8)),
            tax_rate=float(os.getenv("TAX_RATE", 0.08)),
            strict_order_status=_env_bool("STRICT_ORDER_STATUS", True),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            database_url=os.getenv("DATABASE_URL"),
            database_name=os.getenv("DATABASE_NAME"),
        )
