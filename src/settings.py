"""Static configuration for sitewire.

All user-editable settings (channel, storage, logging) live in a single JSON
file for quick edits without touching Python. Secrets stay in the
environment (.env).
"""

import json
import os

from core.config import ChannelConfig, StorageConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

CONFIG_PATH = os.environ.get("SITEWIRE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Channel gateway behavior.
# - timeout_seconds: upper bound for every list/read/send call
# - pairing_timeout_seconds: how long one QR code stays valid before refresh
# - group_match: "first" (first partial match wins) or "strict" (ambiguity fails)
_channel = _CONFIG.get("channel", {})
CHANNEL = ChannelConfig(
    timeout_seconds=float(_channel.get("timeout_seconds", 30)),
    pairing_timeout_seconds=float(_channel.get("pairing_timeout_seconds", 120)),
    group_match=_channel.get("group_match", "first"),
)
QR_REFRESHES = int(_channel.get("qr_refreshes", 3))

# Project storage: "memory" keeps projects for the process lifetime only.
_storage = _CONFIG.get("storage", {})
_db_path = _storage.get("path", "sitewire.db")
if not os.path.isabs(_db_path):
    _db_path = os.path.join(PROJECT_ROOT, _db_path)
STORAGE = StorageConfig(backend=_storage.get("backend", "memory"), path=_db_path)

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
