"""
Request and response bodies of the HTTP API
"""

from datetime import date
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from sahaayak.core.models import IntentionFrequency, MoodSource, Persona

class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)

class DraftRequest(BaseModel):
    text: str = ""

class ModerationRequest(BaseModel):
    text: str = Field(..., min_length=1)

class MoodRequest(BaseModel):
    mood: str
    on_date: Optional[date] = None
    source: MoodSource = MoodSource.CHECK_IN
    activities: List[str] = Field(default_factory=list)
    people: List[str] = Field(default_factory=list)
    note: Optional[str] = None

class JournalRequest(BaseModel):
    content: str = Field(..., min_length=1)
    mood: str
    prompt: str = ""
    on_date: Optional[date] = None

class TaskCompletionRequest(BaseModel):
    day: int = Field(..., ge=1)
    task_id: str

class IntentionRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    frequency: IntentionFrequency = IntentionFrequency.DAILY
    target: int = Field(1, ge=1)

class IntentionCompletionRequest(BaseModel):
    on_date: Optional[date] = None

class PostRequest(BaseModel):
    circle_id: str
    title: str
    content: str

class CommentRequest(BaseModel):
    post_id: str
    content: str

class SettingsRequest(BaseModel):
    selected_persona: Optional[Persona] = None
    dynamic_persona_enabled: Optional[bool] = None

class ContactRequest(BaseModel):
    name: str
    phone: str
    relationship: Optional[str] = None

class GoalRequest(BaseModel):
    goal: str = Field(..., min_length=1, max_length=500)

class MutationResponse(BaseModel):
    """Mutations by guests report success=False and no record"""
    success: bool
    record: Optional[Dict[str, Any]] = None

class HealthCheck(BaseModel):
    status: str
    service: str
    version: str
    timestamp: float
    data: Dict[str, Any] = Field(default_factory=dict)

def mutation(record: Any) -> MutationResponse:
    if record is None:
        return MutationResponse(success=False)
    return MutationResponse(success=True, record=record.to_dict())
