"""
Pipeline configuration management using Pydantic Settings.
"""
from typing import Dict, List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Pipeline settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Apparel Recolor Pipeline"
    LOG_LEVEL: str = "INFO"

    # Garment vocabulary
    APPAREL_KEYWORDS: List[str] = [
        "shirt", "tshirt", "t-shirt", "blouse", "top",
        "pants", "jeans", "trousers", "shorts",
        "dress", "skirt",
        "jacket", "coat", "hoodie", "sweater", "cardigan", "outerwear",
        "shoe", "shoes", "sneakers", "boots", "sandals", "footwear",
        "hat", "cap", "beanie",
        "sock", "socks",
        "tie", "scarf",
        "glove", "gloves",
        "suit", "vest",
        "underwear", "bra",
        "swimsuit", "bikini",
    ]
    GENERIC_APPAREL_TERMS: List[str] = ["apparel", "garment", "clothing"]
    # Category-level words never chosen as a refined label
    REFINER_EXCLUDED_TERMS: List[str] = ["apparel", "garment", "clothing", "outerwear", "footwear"]
    CATEGORY_KEYWORDS: Dict[str, List[str]] = {
        "top": [
            "top", "shirt", "t-shirt", "tshirt", "blouse", "tank", "sweater",
            "hoodie", "jacket", "coat", "cardigan", "vest", "blazer",
        ],
        "bottom": ["bottom", "pants", "jeans", "trousers", "shorts", "skirt", "leggings"],
        "dress": ["dress", "gown"],
        "footwear": ["shoes", "sneakers", "boots", "sandals", "heels"],
        "accessory": ["hat", "cap", "beanie", "tie", "scarf", "belt", "glove"],
    }

    # Color transfer
    BACKGROUND_THRESHOLD: int = 240  # all channels >= this is background

    # Matcher weights
    SCORE_EXACT: int = 1000
    SCORE_LABEL_CONTAINS_QUERY: int = 500
    SCORE_QUERY_CONTAINS_LABEL: int = 400
    SCORE_CATEGORY: int = 300
    SCORE_TOKEN_EXACT: int = 50
    SCORE_TOKEN_PARTIAL: int = 25

    # Coarse color buckets
    ACHROMATIC_SATURATION: int = 30
    BRIGHTNESS_BLACK: int = 50
    BRIGHTNESS_GRAY: int = 130
    BRIGHTNESS_LIGHT_GRAY: int = 200

    # External services
    SERVICE_TIMEOUT_SECONDS: float = 30.0
    MAX_CANDIDATE_WORKERS: int = 4
    GOOGLE_CLOUD_PROJECT: str = ""
    GOOGLE_CLOUD_LOCATION: str = "us-central1"
    IMAGEN_MODEL: str = "imagen-3.0-generate-001"

    # Generation and shopping
    TEMPLATE_PROMPT: str = (
        "A studio product photo of a single {label} in a plain medium gray color, "
        "centered on a pure white background, no model, no text, no pattern"
    )
    SHOPPING_SEARCH_URL: str = "https://www.google.com/search?tbm=shop&q={query}"


settings = Settings()
