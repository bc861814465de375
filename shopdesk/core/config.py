from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_NAME: str = "ShopDesk"
    version: str = "2.0.0"
    DEBUG: bool = False
    APP_DOMAIN: str = "example.com"
    APP_DATABASE_DSN: str = "sqlite:////tmp/shopdesk.db"
    REDIS_URL: str = "redis://localhost:6379"

    # CORS
    CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Notifications
    NOTIFICATION_RETENTION_DAYS: int = 30  # dedup window and resolved-history lifetime
    ACTIVE_FEED_LIMIT: int = 100
    BROADCAST_QUEUE_SIZE: int = 100

    # Alert generators
    ALERT_SCAN_LIMIT: int = 20
    GST_DUE_DAYS: int = 7
    GST_DUE_SOON_DAYS: int = 3
    GST_HIGH_VALUE_THRESHOLD: float = 10000
    PAYMENT_OVERDUE_DAYS: int = 3
    PAYMENT_SEVERELY_OVERDUE_DAYS: int = 7
    PAYMENT_HIGH_VALUE_THRESHOLD: float = 5000
    CURRENCY_SYMBOL: str = "₹"


settings = Settings()
