# storefront/config.py
import os
from dotenv import load_dotenv

load_dotenv()


def _database_url() -> str:
    url = os.getenv("DATABASE_URL")
    if url:
        return url
    return (
        f"postgresql+asyncpg://{os.getenv('STORE_DB_USER', 'postgres')}:{os.getenv('STORE_DB_PASSWORD', '')}"
        f"@{os.getenv('STORE_DB_HOST', 'localhost')}:{os.getenv('STORE_DB_PORT', '5432')}"
        f"/{os.getenv('STORE_DB_NAME', 'storefront')}"
    )


DATABASE_URL = _database_url()
SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() in ("1", "true", "yes")

SECRET_KEY = os.getenv("SECRET_KEY", "your_secret_key")
ALGORITHM = os.getenv("ALGORITHM", "HS256")

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
