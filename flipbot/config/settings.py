"""
Application settings using Pydantic Settings.

Loads configuration from environment variables with validation.
"""

from typing import Optional
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings are loaded from .env file or environment variables.
    Uses Pydantic for validation and type checking.
    """

    # App Configuration
    APP_NAME: str = Field(default="Flipbot")
    APP_VERSION: str = Field(default="1.0.0")
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Server
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=3000)

    # Database
    MONGODB_URL: str = Field(..., description="MongoDB connection string")
    MONGODB_DB_NAME: str = Field(default="flipbot")
    STATE_COLLECTION: str = Field(default="bot_state")
    STATE_DOCUMENT_ID: int = Field(default=1)

    # Binance Futures
    BINANCE_API_KEY: str = Field(..., description="Binance API key")
    BINANCE_API_SECRET: str = Field(..., description="Binance API secret")
    BINANCE_TESTNET: bool = Field(default=False)
    BINANCE_RECV_WINDOW: Optional[int] = Field(default=None)
    EXCHANGE_TIMEOUT_SECONDS: float = Field(default=10.0)

    # Trading
    SYMBOL: str = Field(default="SOLUSDT")
    QUOTE_ASSET: str = Field(default="USDT")
    LEVERAGE: int = Field(default=5)
    UTILIZATION_FRACTION: float = Field(default=0.95)
    STOP_LOSS_FRACTION: float = Field(default=0.20)
    TAKE_PROFIT_FRACTION: float = Field(default=0.005)
    PRICE_PRECISION: int = Field(default=2)

    # Webhook
    BUY_SIGNAL_MESSAGE: str = Field(default="SuperTrend Buy!")
    SELL_SIGNAL_MESSAGE: str = Field(default="SuperTrend Sell!")
    WEBHOOK_PASSPHRASE: Optional[str] = Field(default=None)

    # Logging
    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="colored")
    LOG_FILE_PATH: Optional[str] = Field(default=None)

    @field_validator("LEVERAGE")
    @classmethod
    def validate_leverage(cls, v: int) -> int:
        """Validate leverage is within the exchange range."""
        if v < 1 or v > 125:
            raise ValueError("LEVERAGE must be between 1 and 125")
        return v

    @field_validator("UTILIZATION_FRACTION", "STOP_LOSS_FRACTION", "TAKE_PROFIT_FRACTION")
    @classmethod
    def validate_fraction(cls, v: float) -> float:
        """Validate fractions are strictly between 0 and 1."""
        if v <= 0 or v >= 1:
            raise ValueError("fraction settings must be between 0 and 1")
        return v

    @field_validator("EXCHANGE_TIMEOUT_SECONDS")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate exchange timeout is positive."""
        if v <= 0:
            raise ValueError("EXCHANGE_TIMEOUT_SECONDS must be positive")
        return v

    @field_validator("PRICE_PRECISION")
    @classmethod
    def validate_price_precision(cls, v: int) -> int:
        if v < 0:
            raise ValueError("PRICE_PRECISION must not be negative")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "ignore",
    }


def get_settings() -> Settings:
    """Get settings instance (lazy loading)."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


_settings: Settings | None = None

# Try to initialize settings on import
try:
    settings = get_settings()
except Exception as e:
    # If .env file doesn't exist or required fields are missing,
    # settings will be None and should be initialized later
    print(f"Warning: Could not load settings: {str(e)}")
    print("Please create .env file with required configuration (see env.example)")
    settings = None  # type: ignore
