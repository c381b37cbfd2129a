"""
Client configuration, read once from the environment (and a local .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()

API_URL = os.getenv("STOREFRONT_API_URL", "https://localhost:7263/api")
STATE_FILE = os.getenv(
    "STOREFRONT_STATE_FILE",
    os.path.join(os.path.expanduser("~"), ".storefront", "state.json"),
)

DEFAULT_PAGE_SIZE = int(os.getenv("STOREFRONT_PAGE_SIZE", "5"))

# Durable storage keys for the session
TOKEN_KEY = "token"
USER_KEY = "user"

DATE_RANGES = ("week", "month", "quarter", "year")
DEFAULT_DATE_RANGE = "month"
