"""
Exception hierarchy for Inbox Assistant
"""


class InboxAssistantError(Exception):
    """Base exception for all Inbox Assistant errors"""


class AgentGatewayError(InboxAssistantError):
    """The agent call failed before a usable envelope came back"""


class StorageError(InboxAssistantError):
    """Reading or writing the durable key-value store failed"""
