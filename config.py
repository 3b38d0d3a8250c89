"""rapnews-feed configuration."""

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv(Path(__file__).parent / ".env")

# --- Paths ---
BASE_DIR = Path(__file__).parent

# --- API ---
API_HOST: str = os.getenv("API_HOST", "127.0.0.1")
API_PORT: int = int(os.getenv("API_PORT", "8001"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")

# --- WordPress CMS ---
WORDPRESS_URL: str = os.getenv("WORDPRESS_URL", "https://rapnews.com").rstrip("/")
WORDPRESS_API_URL = f"{WORDPRESS_URL}/wp-json/wp/v2"
# Media uploaded under the old domain is served from the backend host
LEGACY_IMAGE_HOST = "donaldbriggs.com"
WORDPRESS_IMAGE_HOST: str = os.getenv("WORDPRESS_IMAGE_HOST", WORDPRESS_URL)
HTTP_TIMEOUT: int = int(os.getenv("HTTP_TIMEOUT", "15"))
USER_AGENT = "rapnews-server-fetch/1.0"

# --- Feed ---
ITEMS_PER_PAGE: int = int(os.getenv("ITEMS_PER_PAGE", "10"))
PER_TAG_OVERFETCH: int = int(os.getenv("PER_TAG_OVERFETCH", "3"))
WP_MAX_PER_PAGE: int = 100  # hard cap enforced by the WP REST API
FETCH_MAX_WORKERS: int = int(os.getenv("FETCH_MAX_WORKERS", "8"))

# --- Article display ---
DEFAULT_IMAGE = "https://images.unsplash.com/photo-1493225457124-a3eb161ffa5f?w=800&h=450&fit=crop"
DEFAULT_AUTHOR = "Rap News"
DEFAULT_CATEGORY = "NEWS"
EXCERPT_MAX_LENGTH: int = 160
# Brand mentions removed from article bodies
BRAND_PATTERNS: list[str] = ["rapnews", "rap news"]
