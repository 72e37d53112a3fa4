"""
Runtime configuration, read from the environment (and a .env file if present)
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)

# Agent identifiers the remote service was provisioned with
DEFAULT_INTERACTIVE_AGENT_ID = "69787126a75ef8a94cc4f0d1"
DEFAULT_PERIODIC_AGENT_ID = "697871441b6268d7b95195f6"

DEFAULT_TIMEOUT_SECONDS = 120.0
DEFAULT_STORE_PATH = "data/store.json"


@dataclass
class AgentConfig:
    """Where and how to reach the agent service"""
    api_url: str = ""
    api_key: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    interactive_agent_id: str = DEFAULT_INTERACTIVE_AGENT_ID
    periodic_agent_id: str = DEFAULT_PERIODIC_AGENT_ID


@dataclass
class AppConfig:
    """Top-level application configuration"""
    agent: AgentConfig = field(default_factory=AgentConfig)
    store_path: str = DEFAULT_STORE_PATH
    log_level: str = "INFO"


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring invalid {name}={raw!r}, using {default}")
        return default


def load_config() -> AppConfig:
    """Build the configuration from environment variables"""
    agent = AgentConfig(
        api_url=os.getenv("AGENT_API_URL", ""),
        api_key=os.getenv("AGENT_API_KEY") or None,
        timeout_seconds=_get_float("AGENT_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        interactive_agent_id=os.getenv("INTERACTIVE_AGENT_ID", DEFAULT_INTERACTIVE_AGENT_ID),
        periodic_agent_id=os.getenv("PERIODIC_AGENT_ID", DEFAULT_PERIODIC_AGENT_ID),
    )
    return AppConfig(
        agent=agent,
        store_path=os.getenv("STORE_PATH", DEFAULT_STORE_PATH),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
