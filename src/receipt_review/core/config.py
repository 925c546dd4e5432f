from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_MERCHANT_ALIASES: dict[str, str] = {
    "MCD": "McDonald's",
    "MCDONALD'S": "McDonald's",
    "MCDONALDS": "McDonald's",
}

# Order is priority: the first category with a matching keyword wins.
DEFAULT_CATEGORY_KEYWORDS: dict[str, list[str]] = {
    "meals": ["restaurant", "mcdonald", "burger", "grill", "cafe", "food"],
    "lodging": ["hotel", "inn", "motel", "marriott", "hilton", "airbnb"],
    "transport": ["uber", "lyft", "taxi", "metro", "bus", "train", "delta", "united"],
}


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    environment: str = "dev"
    database_url: str = "sqlite:///./receipt_review.db"

    openai_api_key: str | None = None
    openai_base_url: str = "https://api.openai.com/v1"
    openai_model: str = "gpt-4o-mini"
    openai_vision_model: str = "gpt-4o-mini"
    ai_timeout_seconds: float = 30.0

    merchant_aliases: dict[str, str] = dict(DEFAULT_MERCHANT_ALIASES)
    category_keywords: dict[str, list[str]] = {
        k: list(v) for k, v in DEFAULT_CATEGORY_KEYWORDS.items()
    }

    policy_rules_seed_path: Path | None = None


settings = Settings()
