"""Centralized configuration — all env vars in one place."""

import os


class Settings:
    """Application settings loaded from environment variables."""

    def __init__(self):
        self.cors_origins: list[str] = os.getenv("CORS_ORIGINS", "*").split(",")
        self.git_sha: str = os.getenv("GIT_SHA", "unknown")
        self.environment: str = os.getenv("ENVIRONMENT", "local")

        # Key-value store. Unset → in-process MemoryKVStore.
        self.redis_url: str | None = os.getenv("REDIS_URL")

        # Caching / upstream behaviour
        self.cache_ttl: int = int(os.getenv("CACHE_TTL", "300"))
        self.daily_cache_ttl: int = int(os.getenv("DAILY_CACHE_TTL", "86400"))
        self.api_timeout: float = float(os.getenv("API_TIMEOUT", "5.0"))

        # Fixed-window rate limiting per client
        self.rate_limit_max: int = int(os.getenv("RATE_LIMIT_MAX", "100"))
        self.rate_limit_window: int = int(os.getenv("RATE_LIMIT_WINDOW", "60"))

        # Upstream APIs
        self.joke_api_url: str = os.getenv("JOKE_API_URL", "https://v2.jokeapi.dev/joke/Any")
        self.quote_api_url: str = os.getenv("QUOTE_API_URL", "https://api.quotable.io/random")
        self.cocktail_api_url: str = os.getenv(
            "COCKTAIL_API_URL", "https://www.thecocktaildb.com/api/json/v1/1/random.php"
        )
        self.calendarific_api_url: str = os.getenv(
            "CALENDARIFIC_API_URL", "https://calendarific.com/api/v2/holidays"
        )
        self.calendarific_api_key: str | None = os.getenv("CALENDARIFIC_API_KEY")
        self.excuse_api_url: str | None = os.getenv("EXCUSE_API_URL")
        self.showerthought_api_url: str | None = os.getenv("SHOWERTHOUGHT_API_URL")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def validate(self) -> list[str]:
        """Return list of unset optional env vars (features fall back to static data)."""
        optional = ["REDIS_URL", "CALENDARIFIC_API_KEY", "EXCUSE_API_URL", "SHOWERTHOUGHT_API_URL"]
        return [var for var in optional if not getattr(self, _attr_for(var))]


settings = Settings()


def _attr_for(env_var: str) -> str:
    """Map env var name to Settings attribute name."""
    return env_var.lower()
