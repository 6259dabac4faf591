from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Ledger storage (SQLite file by default; any SQLAlchemy sync URL works)
    DATABASE_URL: str = "sqlite:///./range_bet.db"

    # Logging
    LOG_LEVEL: str = "INFO"

    # Collateral token precision, used only to render amounts in log lines
    COLLATERAL_DECIMALS: int = 6

    # App
    APP_NAME: str = "Range Bet Engine"
    DEBUG: bool = False  # True echoes SQL statements


settings = Settings()
