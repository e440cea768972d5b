from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # postgresql+asyncpg://... in production, sqlite+aiosqlite for local work and tests
    DATABASE_URL: str = "sqlite+aiosqlite:///./portal.db"

    # If DEV and you hit SSL cert issues on Windows, set DB_SSL_VERIFY=false in .env
    DB_SSL_VERIFY: bool = True

    SECRET_KEY: str = "change-me-in-production"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    SUPER_ADMIN_EMAIL: str | None = None
    SUPER_ADMIN_PASSWORD: str | None = None
    SUPER_ADMIN_NAME: str | None = "Super Admin"
    ENV: str = "dev"  # "dev" or "prod"

    # --- RATE LIMITING ---
    REDIS_URL: str | None = None
    RATE_LIMIT_ENABLED: bool = True
    CONTACT_RATE_LIMIT: str = "5/minute"

    # Browser requests without a session are sent here
    LOGIN_URL: str = "/login"

    # --- PUBLIC STORAGE ---
    STORAGE_BACKEND: str = "local"  # "local" or "supabase"
    PUBLIC_STORAGE_ROOT: str = "storage/app/public"
    SUPABASE_URL: str | None = None
    SUPABASE_KEY: str | None = None
    SUPABASE_BUCKET: str = "public"

    FRONTEND_URL: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"

settings = Settings()
