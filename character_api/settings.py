from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    # Database (override via env); async SQLAlchemy URL
    DATABASE_URL: str = "sqlite+aiosqlite:///./characters.db"

    # App metadata
    APP_TITLE: str = "Characters API"
    APP_VERSION: str = "1.0.0"

    # CORS (applied uniformly to every route)
    CORS_ALLOW_ORIGIN: str = "*"
    CORS_ALLOW_METHODS: str = "GET, POST, PUT, DELETE, OPTIONS"
    CORS_ALLOW_HEADERS: str = "Content-Type, Authorization"

    class Config:
        env_file = ".env"

settings = Settings()
