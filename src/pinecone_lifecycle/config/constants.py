"""Default paths, environment variable names, and constants."""

from __future__ import annotations

from pathlib import Path

import platformdirs

APP_NAME = "pinecone-lifecycle"
APP_AUTHOR = "pinecone-lifecycle"

CONFIG_DIR = platformdirs.user_config_path(APP_NAME, APP_AUTHOR)
CONFIG_FILE = CONFIG_DIR / "config.toml"

# Environment variable names
ENV_API_KEY = "PINECONE_API_KEY"
ENV_CONTROLLER_URL = "PINECONE_CONTROLLER_URL"
ENV_PROFILE = "PINECONE_PROFILE"
ENV_STATE_FILE = "PINECONE_LIFECYCLE_STATE"

# API defaults
DEFAULT_CONTROLLER_URL = "https://api.pinecone.io"
DEFAULT_API_VERSION = "2024-07"
DEFAULT_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 3

# Lifecycle defaults (seconds)
DEFAULT_INDEX_CREATE_TIMEOUT = 5 * 60.0
DEFAULT_INDEX_DELETE_TIMEOUT = 5 * 60.0
DEFAULT_COLLECTION_CREATE_TIMEOUT = 60 * 60.0
DEFAULT_COLLECTION_DELETE_TIMEOUT = 60 * 60.0
DEFAULT_POLL_INTERVAL = 2.0
DEFAULT_MAX_POLL_INTERVAL = 30.0

DEFAULT_STATE_FILE = Path("pinecone-lifecycle.state.json")
