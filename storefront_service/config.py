"""
config.py — Runtime settings for the Storefront Service

All settings come from environment variables with development defaults.
Services accept the policy values as constructor arguments as well, so tests
and embedding code can override them without touching the environment.
"""

import os

# Token signing (the default key is for local development only)
SECRET_KEY = os.environ.get("STOREFRONT_SECRET_KEY", "dev-secret-change-me")
TOKEN_ALGORITHM = os.environ.get("STOREFRONT_TOKEN_ALGORITHM", "HS256")
TOKEN_EXPIRE_MINUTES = int(os.environ.get("STOREFRONT_TOKEN_EXPIRE_MINUTES", 60 * 24))

# Checkout / order administration policies
STOCK_POLICY = os.environ.get("STOREFRONT_STOCK_POLICY", "allow_negative")
STATUS_POLICY = os.environ.get("STOREFRONT_STATUS_POLICY", "permissive")

SEED_DATA = os.environ.get("STOREFRONT_SEED_DATA", "1") == "1"
LOG_FILE = os.environ.get("STOREFRONT_LOG_FILE", "storefront.log")
PORT = int(os.environ.get("PORT", 5000))
