# src/config/settings.py

"""Central configuration for the product_compare engine."""

import os
from pathlib import Path

from curl_cffi.requests import BrowserTypeLiteral
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Central configuration for the product_compare engine."""

    # --- Aggregation ---
    STRATEGY_TIMEOUT: float = float(
        os.getenv("COMPARE_STRATEGY_TIMEOUT", "30")
    )                                   # Seconds before a fetch is cancelled
    STRATEGY_CANCEL_GRACE: float = float(
        os.getenv("COMPARE_STRATEGY_CANCEL_GRACE", "20")
    )                                   # Wait for a cancelled fetch to stop
    PACING_DELAY: tuple[float, float] = (2.0, 3.0)  # Jitter between strategies
    MAX_PRODUCT_NAME_LENGTH: int = 100
    RECENT_LOGS_LIMIT: int = 100
    LOG_SOURCE: str = os.getenv(
        "COMPARE_LOG_SOURCE", "ProductComparisonAgent"
    )

    # --- Catalog lookup ---
    CATALOG_MATCH_THRESHOLD: float = 0.5  # Min token overlap (Jaccard)

    # --- HTTP strategies ---
    REQUEST_DELAY: float = 2.0          # Seconds between requests
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out
    MAX_RETRIES: int = 3                # Retry count on transient failures

    # --- Resilience ---
    CIRCUIT_BREAKER_THRESHOLD: int = 3  # Consecutive failures to trip
    CIRCUIT_BREAKER_COOLDOWN: float = 120.0  # Seconds before half-open
    MAX_DELAY_MULTIPLIER: int = 8       # Cap for adaptive backoff
    CAPTCHA_KEYWORDS: list[str] = [
        "captcha",
        "verify you are human",
        "unusual traffic",
        "automated requests",
    ]

    # --- Browser Impersonation ---
    IMPERSONATE_BROWSER: BrowserTypeLiteral = "chrome131"
    DEFAULT_HEADERS: dict[str, str] = {
        "Accept": (
            "text/html,application/xhtml+xml,"
            "application/xml;q=0.9,image/avif,"
            "image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "sec-ch-ua": (
            '"Google Chrome";v="131", '
            '"Chromium";v="131", '
            '"Not_A Brand";v="24"'
        ),
        "sec-ch-ua-mobile": "?0",
        "sec-ch-ua-platform": '"Windows"',
        "sec-fetch-dest": "document",
        "sec-fetch-mode": "navigate",
        "sec-fetch-site": "none",
        "sec-fetch-user": "?1",
        "Upgrade-Insecure-Requests": "1",
    }

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    CATALOG_PATH: Path = BASE_DIR / "src" / "config" / "catalog.json"
    RESULTS_DIR: Path = BASE_DIR / "results"
    LOGS_DIR: Path = BASE_DIR / "logs"

    # --- Retail sites read through schema.org structured data ---
    STRUCTURED_DATA_SITES: dict[str, dict[str, str]] = {
        "bestbuy": {
            "homepage": "https://www.bestbuy.com/",
            "search_url": (
                "https://www.bestbuy.com/site/searchpage.jsp?st={query}"
            ),
            "product_link": "li.sku-item h4.sku-title a, .sku-block a",
        },
        "walmart": {
            "homepage": "https://www.walmart.com/",
            "search_url": "https://www.walmart.com/search?q={query}",
            "product_link": 'a[link-identifier], a[href*="/ip/"]',
        },
        "target": {
            "homepage": "https://www.target.com/",
            "search_url": "https://www.target.com/s?searchTerm={query}",
            "product_link": 'a[data-test="product-title"], a[href*="/p/"]',
        },
    }

    # --- Strategies (registry for future extensibility) ---
    AVAILABLE_STRATEGIES: list[dict[str, str]] = [
        {
            "id": "catalog",
            "label": "Local Catalog",
            "strategy": "src.strategies.catalog_strategy.CatalogStrategy",
        },
        {
            "id": "bestbuy",
            "label": "Best Buy",
            "strategy": (
                "src.strategies.structured_data_strategy"
                ".StructuredDataStrategy"
            ),
        },
        {
            "id": "walmart",
            "label": "Walmart",
            "strategy": (
                "src.strategies.structured_data_strategy"
                ".StructuredDataStrategy"
            ),
        },
        {
            "id": "target",
            "label": "Target",
            "strategy": (
                "src.strategies.structured_data_strategy"
                ".StructuredDataStrategy"
            ),
        },
    ]
