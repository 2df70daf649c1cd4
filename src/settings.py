"""Static configuration for txscope.

All user-editable settings (index endpoint, page size, concurrency
ceilings, logging) live in a single JSON file for quick edits without
touching Python.
"""

import json
import os

from core.config import AggregationConfig

PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))

# config.json sits next to the sources unless TXSCOPE_CONFIG points elsewhere.
CONFIG_PATH = os.getenv("TXSCOPE_CONFIG", os.path.join(PROJECT_ROOT, "config.json"))


def _load_json_config() -> dict:
    """Load config.json with a flat, user-friendly schema."""

    if not os.path.exists(CONFIG_PATH):
        raise FileNotFoundError(f"Config file not found: {CONFIG_PATH}")

    with open(CONFIG_PATH, "r", encoding="utf-8") as handle:
        return json.load(handle)


_CONFIG = _load_json_config()

# Expose the raw config for modules that need structured access.
CONFIG = _CONFIG

# Index endpoint. The API key is a secret and comes from .env instead.
_index = _CONFIG.get("index", {})
INDEX_BASE_URL = _index.get("base_url", "")
INDEX_API_PREFIX = _index.get("api_prefix", "/api")
INDEX_TIMEOUT_SECONDS = float(_index.get("timeout_seconds", 10))

# Page size and fan-out ceilings. These protect the index from unbounded
# parallel load; see AggregationConfig for the defaults.
_aggregation = _CONFIG.get("aggregation", {})
AGGREGATION = AggregationConfig(
    max_batch_size=int(_aggregation.get("max_batch_size", 100)),
    rpc_concurrency=int(_aggregation.get("rpc_concurrency", 5)),
    deposit_address_concurrency=int(_aggregation.get("deposit_address_concurrency", 2)),
    deposit_transaction_concurrency=int(_aggregation.get("deposit_transaction_concurrency", 1)),
)

# Which network's address formats are accepted: mainnet, testnet or any.
ADDRESS_NETWORK = _CONFIG.get("address", {}).get("network", "mainnet")

# Logging configuration (optional).
LOGGING = _CONFIG.get("logging", {})
