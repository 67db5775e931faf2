from pydantic_settings import BaseSettings
from pydantic import Field
import os

class Settings(BaseSettings):
    # === DATABASE ===
    DATABASE_URL: str = Field(default=os.environ.get("DATABASE_URL", "sqlite:///./training_portal.db"), description="Database URL (PostgreSQL in production)")

    # === JWT AUTH ===
    SECRET_KEY: str = Field(default=os.environ.get("SECRET_KEY", "change-me"), description="Secret key for JWT token signing")
    ALGORITHM: str = Field(default=os.environ.get("ALGORITHM", "HS256"), description="JWT algorithm")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=int(os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", 60)), description="JWT token expiration time in minutes")

    # === EMAIL ===
    EMAIL_HOST: str = Field(default=os.environ.get("EMAIL_HOST", ""), description="SMTP host")
    EMAIL_PORT: int = Field(default=int(os.environ.get("EMAIL_PORT", 587)), description="SMTP port")
    EMAIL_HOST_USER: str = Field(default=os.environ.get("EMAIL_HOST_USER", ""), description="SMTP username")
    EMAIL_HOST_PASSWORD: str = Field(default=os.environ.get("EMAIL_HOST_PASSWORD", ""), description="SMTP password")
    EMAIL_FROM: str = Field(default=os.environ.get("EMAIL_FROM", ""), description="Email sender address")
    EMAIL_FROM_NAME: str = Field(default=os.environ.get("EMAIL_FROM_NAME", "Training Center"), description="Display name on outgoing mail")

    # === PAYMENT GATEWAY ===
    PAYSTACK_SECRET_KEY: str = Field(default=os.environ.get("PAYSTACK_SECRET_KEY", ""), description="Paystack secret key")
    FLUTTERWAVE_SECRET_KEY: str = Field(default=os.environ.get("FLUTTERWAVE_SECRET_KEY", ""), description="Flutterwave secret key")
    FLUTTERWAVE_WEBHOOK_HASH: str = Field(default=os.environ.get("FLUTTERWAVE_WEBHOOK_HASH", ""), description="Secret hash Flutterwave sends in the verif-hash header")
    PROVIDER_TIMEOUT_SECONDS: float = Field(default=float(os.environ.get("PROVIDER_TIMEOUT_SECONDS", 15.0)), description="Timeout for provider API calls")

    # === FRONTEND ===
    FRONTEND_URL: str = Field(default=os.environ.get("FRONTEND_URL", "http://localhost:5173"), description="Base URL used in email links")

    # === DEBUG MODE ===
    DEBUG: bool = Field(default=os.environ.get("DEBUG", "True").lower() == "true", description="Debug mode")

    class Config:
        env_file = ".env"
        case_sensitive = False

# Create settings instance
settings = Settings()
