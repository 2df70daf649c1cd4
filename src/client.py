"""Index client factory for txscope.

The client owns an HTTP connection pool, so callers use it as an async
context manager to make it obvious when connections are opened and closed.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

from dotenv import load_dotenv

from adapters.insight_client import InsightIndexClient


def build_client(base_url: str, api_prefix: str = "/api", timeout: float = 10.0) -> InsightIndexClient:
    """Create an Insight index client.

    We read INDEX_API_KEY (and an optional INDEX_BASE_URL override) via
    python-dotenv to keep secrets out of config.json.
    """

    load_dotenv()

    resolved_url: Optional[str] = os.getenv("INDEX_BASE_URL") or base_url
    api_key = os.getenv("INDEX_API_KEY")

    # Fail fast instead of sending requests to a relative URL.
    if not resolved_url:
        raise RuntimeError("Missing index base_url in config.json or INDEX_BASE_URL in environment")

    logging.getLogger(__name__).info("Initializing index client for %s", resolved_url)

    return InsightIndexClient(resolved_url, api_prefix=api_prefix, api_key=api_key, timeout=timeout)
