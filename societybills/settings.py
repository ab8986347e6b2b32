from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_prefix="SOCIETYBILLS_", extra="ignore")

    db_url: str = "sqlite:///societybills.db"

    timezone: str = "Asia/Kolkata"
    currency_symbol: str = "₹"

    generation_workers: int = 8
    partial_batch_policy: str = "abort"  # 'abort' or 'keep_completed'

    notification_backend: str = "log"
    notification_timeout_seconds: float = 5.0
    notification_workers: int = 8

    log_level: str = "INFO"
    log_json: bool = False


settings = Settings()
