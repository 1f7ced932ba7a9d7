from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    APP_NAME: str = "CLINICA-CAJA"
    SECRET_KEY: str = "change-me"
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    DATABASE_URL: str = "sqlite+pysqlite:///./clinica.db"
    CASH_TIMEZONE: str = "America/Mexico_City"
    CASH_CUT_TIME_1: str = "14:00"
    CASH_CUT_TIME_2: str = "18:00"
    DEFAULT_ADMIN_USERNAME: str = "admin"
    DEFAULT_ADMIN_EMAIL: str = "admin@clinica.com"
    DEFAULT_ADMIN_PASSWORD: str = "change-me"
    DEFAULT_ADMIN_FULL_NAME: str = "Administrador"
    METRICS_ENABLED: bool = True
    OPS_ENABLE_INTEGRITY_SCAN: bool = True

settings = Settings()
