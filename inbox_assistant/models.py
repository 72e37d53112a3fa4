"""
Shared data models for Inbox Assistant

Wire and persisted records are pydantic models (camelCase on the wire for
what the browser-era store wrote, snake_case for agent payloads); purely
in-memory session records are dataclasses.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


ActivityStatus = Literal["success", "error"]
ChatRole = Literal["user", "assistant"]


# === Persisted State ===

class Settings(BaseModel):
    """Periodic cleanup policy; always a complete record"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    promotional: bool
    old_emails: bool
    age_threshold: Literal[7, 14, 30, 60, 90]
    schedule_enabled: bool
    frequency: Literal["daily", "weekly", "disabled"]
    schedule_time: str = Field(pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    require_confirmation: bool
    max_emails_per_run: Literal[50, 100, 200, 500]


DEFAULT_SETTINGS = Settings(
    promotional=True,
    old_emails=True,
    age_threshold=30,
    schedule_enabled=False,
    frequency="weekly",
    schedule_time="09:00",
    require_confirmation=True,
    max_emails_per_run=100,
)


class ActivityLogEntry(BaseModel):
    """One terminal outcome of an agent interaction"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: str
    timestamp: datetime
    action: str
    emails_deleted: int = Field(ge=0)
    status: ActivityStatus


# === Agent Payloads ===

class AgentPayload(BaseModel):
    """Agent result fragment; an explicit null reads as the field's default"""

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class EmailPreview(AgentPayload):
    """Read-only email summary returned by the interactive agent"""
    model_config = ConfigDict(frozen=True)

    id: str
    sender: str = ""
    subject: str = ""
    date: str = ""
    snippet: str = ""
    category: Optional[str] = None


class CriteriaIdentified(AgentPayload):
    sender: Optional[str] = None
    date_range: str = ""
    category: str = ""
    keywords: List[str] = Field(default_factory=list)


class InteractiveResult(AgentPayload):
    """Result shape of the interactive (chat) agent"""
    action: str = ""
    emails_found: int = 0
    emails_deleted: int = Field(default=0, ge=0)
    criteria_identified: CriteriaIdentified = Field(default_factory=CriteriaIdentified)
    email_preview: List[EmailPreview] = Field(default_factory=list)
    confirmation_required: bool = False
    message: str = ""


class RuleResult(AgentPayload):
    rule_name: str = ""
    rule_type: str = ""
    emails_found: int = 0
    emails_deleted: int = 0
    criteria_applied: Dict[str, Any] = Field(default_factory=dict)
    status: str = ""


class CleanupSummary(AgentPayload):
    total_emails_processed: int = Field(default=0, ge=0)
    total_emails_deleted: int = Field(default=0, ge=0)
    rules_executed: int = 0
    execution_time_seconds: float = 0.0


class PeriodicResult(AgentPayload):
    """Result shape of the periodic (scheduled cleanup) agent"""
    cleanup_summary: CleanupSummary
    rules_results: List[RuleResult] = Field(default_factory=list)
    next_scheduled_run: str = ""
    errors: List[str] = Field(default_factory=list)


class AgentResponse(BaseModel):
    """Inner agent response; `result` stays raw until the caller picks its shape"""
    status: str = "error"
    message: Optional[str] = None
    result: Optional[Dict[str, Any]] = None

    @field_validator("result", mode="before")
    @classmethod
    def _decode_text_result(cls, value):
        # Some agents return their JSON result as a string
        if isinstance(value, str):
            return json.loads(value)
        return value


class Envelope(BaseModel):
    """Normalized outer wrapper around an agent response"""
    success: bool
    error: Optional[str] = None
    response: AgentResponse = Field(default_factory=AgentResponse)

    @property
    def succeeded(self) -> bool:
        return self.success and self.response.status == "success"

    def failure_message(self, fallback: str) -> str:
        """Best available explanation for a failed envelope"""
        return self.error or self.response.message or fallback


# === Session State ===

@dataclass
class ChatMessage:
    """One transcript line; transient, never persisted"""
    id: str
    role: ChatRole
    content: str
    timestamp: str


@dataclass
class ActivityStats:
    """Dashboard totals derived from the activity log"""
    week_count: int = 0
    month_count: int = 0
    last_cleanup: Optional[datetime] = None


@dataclass
class RunOutcome:
    """What a periodic run or test run produced"""
    status: Literal["rejected", "success", "error"]
    show_summary: bool = False
    result: Optional[PeriodicResult] = None
    error: Optional[str] = None
    entry: Optional[ActivityLogEntry] = field(default=None, repr=False)
