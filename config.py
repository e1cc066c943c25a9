"""
Configuration module.
Reads server, storage and logging settings from the environment (.env supported).
"""

import os
from typing import List

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


# Snapshot file
TASKS_DATA_FILE = os.getenv("TASKS_DATA_FILE", "data.json")

# HTTP server
HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "8080"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()


def get_cors_origins() -> List[str]:
    """
    Origins allowed to call the API from a browser.

    Returns:
        Comma-separated TASKS_CORS_ORIGINS as a list (front-end dev server by default)
    """
    raw = os.getenv("TASKS_CORS_ORIGINS", "http://localhost:5173")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]
