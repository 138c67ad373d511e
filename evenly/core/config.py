from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    DATABASE_URL: str
    JWT_SECRET: str
    JWT_ALGO: str = "HS256"
    JWT_ISSUER: str | None = None
    JWT_AUDIENCE: str | None = None

    # when set, RS256 tokens are checked against the provider's key set
    JWKS_URL: str | None = None

    LOG_LEVEL: str = "INFO"
    DB_CONNECT_RETRIES: int = 5

    class Config:
        env_file = ".env"

settings = Settings()
