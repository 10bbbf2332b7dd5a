"""Static configuration for vidprivacy.

All user-editable settings (tag, privacy domain, scan cadence, dedup,
logging) live in a single JSON file for quick edits without touching Python.
Credentials stay in the environment (.env).
"""

import json
import os

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.getenv("VIDPRIVACY_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Tag to watch for; matched case-insensitively anywhere in the post text.
HASHTAG = _CONFIG.get("monitor", {}).get("hashtag", "#videoprivacy")

# Domain the privacy links point at (scheme optional).
PRIVACY_DOMAIN = _CONFIG.get("privacy", {}).get("domain", "videoprivacy.org")

_reply = _CONFIG.get("reply", {})
REPLY_PREFIX = _reply.get("prefix", "The Video Privacy Link You Requested:\n")
REPLY_FOOTER = _reply.get("footer", "")

_preview = _CONFIG.get("preview", {})
PREVIEW_ENABLED = bool(_preview.get("enabled", True))

# Fast-path duplicate cache, trimmed to keep_fraction of capacity when full.
_dedup = _CONFIG.get("dedup", {})
DEDUP_CACHE_CAPACITY = int(_dedup.get("cache_capacity", 100))
DEDUP_KEEP_FRACTION = float(_dedup.get("keep_fraction", 0.5))

# Scan cadence and candidate filters.
_scan = _CONFIG.get("scan", {})
SCAN_INTERVAL_SECONDS = float(_scan.get("interval_seconds", 30))
SEARCH_LIMIT = int(_scan.get("search_limit", 25))
FALLBACK_LIMIT = int(_scan.get("fallback_limit", 20))
MAX_AGE_HOURS = float(_scan.get("max_age_hours", 24))
DISPATCH_DELAY_SECONDS = float(_scan.get("dispatch_delay_seconds", 0))
FALLBACK_DELAY_SECONDS = float(_scan.get("fallback_delay_seconds", 1))
# Off by default: post bodies may hold truncated URLs.
ALLOW_TEXT_FALLBACK = bool(_scan.get("allow_text_fallback", False))

HTTP_TIMEOUT_SECONDS = float(_CONFIG.get("http", {}).get("timeout_seconds", 10))

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
