"""Runtime configuration: defaults, optional JSON file, environment overrides."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/search_config.json")

DEFAULT_CONFIG = {
    "db_path": "cache/articles.db",
    "feeds": {
        "ai": ["https://techcrunch.com/category/artificial-intelligence/feed/"],
        "gadgets": ["https://www.theverge.com/rss/index.xml"],
        "startups": ["https://techcrunch.com/category/startups/feed/"],
        "crypto": ["https://www.coindesk.com/arc/outboundfeeds/rss/"],
    },
    "feed_timeout": 15,
    "recent_search_limit": 5,
    "trending_limit": 8,
}


def load_config() -> Dict:
    config_path = Path(os.getenv("SEARCH_CONFIG_PATH", DEFAULT_CONFIG_PATH))
    config = dict(DEFAULT_CONFIG)
    if config_path.exists():
        try:
            data = json.loads(config_path.read_text())
            config.update(data)
        except Exception as exc:
            logger.warning("Failed to load search config, using defaults: %s", exc)

    if os.getenv("SEARCH_DB_PATH"):
        config["db_path"] = os.environ["SEARCH_DB_PATH"]
    if os.getenv("FEED_TIMEOUT"):
        try:
            config["feed_timeout"] = float(os.environ["FEED_TIMEOUT"])
        except ValueError:
            logger.warning("Ignoring invalid FEED_TIMEOUT=%r", os.environ["FEED_TIMEOUT"])
    return config
