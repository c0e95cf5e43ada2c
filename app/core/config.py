from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Async driver URL: sqlite+aiosqlite for local/dev, postgresql+asyncpg in prod
    DATABASE_URL: str = "sqlite+aiosqlite:///./dashboard.db"

    ENV: str = "dev"  # "dev" or "prod"
    TESTING: bool = False

    # Seed default catalog + superadmin dashboard on startup
    SEED_DEFAULTS: bool = True

    FRONTEND_URL: str = "http://localhost:5173"  # CORS origin of the dashboard UI

    # --- WIDGET DATA BACKENDS ---
    WIDGET_API_BASE_URL: str = "http://localhost:3000/api/v1"
    WIDGET_FETCH_TIMEOUT: float = 10.0
    DEFAULT_CURRENCY_UNIT: str = "INR"

    # --- PERMISSIONS ---
    # Reserved code meaning "grant all" (SuperAdmin)
    PERMISSION_WILDCARD: str = "*"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

settings = Settings()
