import os

# Basic settings helper to read environment configuration.

DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "app.db")


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL", f"sqlite:///{DEFAULT_DB_PATH}")
        self.JWT_SECRET: str | None = os.getenv("JWT_SECRET")
        self.GOOGLE_CLIENT_ID: str | None = os.getenv("GOOGLE_CLIENT_ID")
        self.GEOAPIFY_API_KEY: str | None = os.getenv("GEOAPIFY_API_KEY")
        self.GEMINI_API_KEY: str | None = os.getenv("GEMINI_API_KEY")
        self.GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-1.5-flash")
        self.UNSPLASH_ACCESS_KEY: str | None = os.getenv("UNSPLASH_ACCESS_KEY")
        self.CLIENT_URL: str = os.getenv("CLIENT_URL", "http://localhost:5173")
        self.EXTERNAL_SEARCH_ENABLED: bool = _as_bool(os.getenv("EXTERNAL_SEARCH_ENABLED"), True)


settings = Settings()
