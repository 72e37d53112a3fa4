"""
Agent Gateway - sends an instruction to a remote agent and normalizes the reply
"""

import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from inbox_assistant.config import AgentConfig
from inbox_assistant.exceptions import AgentGatewayError
from inbox_assistant.models import Envelope


logger = logging.getLogger(__name__)

# Shown to the user for any failure to get a usable reply
NETWORK_ERROR_MESSAGE = "Network error. Please try again."


class AgentGateway:
    """Async HTTP client for the agent service.

    Any failure to obtain a well-formed envelope (connection error, timeout,
    non-2xx status, undecodable body) raises AgentGatewayError. Agent-level
    failures come back as an envelope with ``success`` false or a non-success
    inner status and are left for the caller to interpret.
    """

    def __init__(self, config: AgentConfig, client: Optional[httpx.AsyncClient] = None):
        self.config = config
        self._client = client or httpx.AsyncClient(timeout=config.timeout_seconds)

    async def call(self, instruction: str, agent_id: str) -> Envelope:
        """Send one instruction to one agent"""
        if not self.config.api_url:
            raise AgentGatewayError("AGENT_API_URL is not configured")

        headers = {"x-api-key": self.config.api_key} if self.config.api_key else {}
        payload = {"message": instruction, "agent_id": agent_id}

        logger.info(f"Calling agent {agent_id}")
        try:
            response = await self._client.post(self.config.api_url, json=payload, headers=headers)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as error:
            raise AgentGatewayError(f"Agent request failed: {error}") from error
        except ValueError as error:
            raise AgentGatewayError(f"Agent returned invalid JSON: {error}") from error

        return self.normalize(data)

    @staticmethod
    def normalize(data: Any) -> Envelope:
        """Turn a decoded response body into an Envelope"""
        if isinstance(data, dict) and "success" not in data and "status" in data:
            # Bare agent response without the outer wrapper
            data = {"success": data.get("status") == "success", "response": data}

        try:
            return Envelope.model_validate(data)
        except ValidationError as error:
            raise AgentGatewayError(f"Malformed agent envelope: {error.error_count()} errors") from error

    async def aclose(self) -> None:
        await self._client.aclose()


def describe(envelope: Envelope) -> Dict[str, Any]:
    """Short loggable summary of an envelope"""
    return {
        "success": envelope.success,
        "status": envelope.response.status,
        "error": envelope.error,
        "has_result": envelope.response.result is not None,
    }
