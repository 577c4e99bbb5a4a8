#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Core Data Models
Data models with validation and typing

Version: 1.0.0
Date: 2026-10-19
"""

import uuid
from datetime import date
from functools import total_ordering
from typing import Dict, List, Optional, Any, Iterable
from dataclasses import dataclass, field, asdict, fields, replace
from enum import Enum
import logging

from sahaayak.utils.datetime_utils import now_iso, to_date

logger = logging.getLogger(__name__)

# ===== ENUMS =====

@total_ordering
class RiskTier(Enum):
    """Crisis severity of a single utterance, ordered none < low < high"""
    NONE = "none"
    LOW = "low"
    HIGH = "high"

    @property
    def severity(self) -> int:
        return _RISK_SEVERITY[self.value]

    def __lt__(self, other):
        if not isinstance(other, RiskTier):
            return NotImplemented
        return self.severity < other.severity

    @classmethod
    def parse(cls, raw: Optional[str]) -> "RiskTier":
        """One-word decoding; 'high' wins over 'low', anything else is none"""
        text = (raw or "").strip().lower()
        if "high" in text:
            return cls.HIGH
        if "low" in text:
            return cls.LOW
        return cls.NONE

_RISK_SEVERITY = {"none": 0, "low": 1, "high": 2}

class Persona(Enum):
    """Companion personas"""
    EMPATHETIC = "empathetic"
    COACH = "coach"
    CALM = "calm"
    MINDFUL = "mindful"
    ENERGETIC = "energetic"

    @classmethod
    def parse(cls, raw: Optional[str]) -> Optional["Persona"]:
        """Exact match of a single word against the closed set"""
        text = (raw or "").strip().strip(".'\"").lower()
        for persona in cls:
            if persona.value == text:
                return persona
        return None

class Sender(Enum):
    """Author of a chat message"""
    USER = "user"
    ASSISTANT = "assistant"

class StreakType(Enum):
    """Streak kinds"""
    JOURNALING = "journaling"
    MOOD_TRACKING = "mood_tracking"

class IntentionFrequency(Enum):
    """Intention periods"""
    DAILY = "daily"
    WEEKLY = "weekly"

class MoodSource(Enum):
    """Where a mood log came from"""
    CHECK_IN = "check-in"
    JOURNAL = "journal"

class WellnessTaskType(Enum):
    """Journey task kinds"""
    READ = "read"
    EXERCISE = "exercise"
    JOURNAL = "journal"

MOOD_OPTIONS = ['😔', '😐', '🙂', '😃', '😍']

# ===== VALIDATION HELPERS =====

class ValidationError(Exception):
    """Invalid model data"""
    pass

def validate_text(text: str, min_length: int = 1, max_length: int = 5000, field_name: str = "text") -> str:
    """Validate and strip a text field"""
    if not isinstance(text, str):
        raise ValidationError(f"{field_name} must be a string")

    text = text.strip()
    if len(text) < min_length:
        raise ValidationError(f"{field_name} must contain at least {min_length} characters")

    if len(text) > max_length:
        raise ValidationError(f"{field_name} must contain at most {max_length} characters")

    return text

def validate_enum_value(value: Any, enum_class: type, field_name: str = "value") -> str:
    """Validate an enum value, accepting members or raw values"""
    if isinstance(value, enum_class):
        return value.value
    try:
        enum_class(value)
        return value
    except ValueError:
        valid_values = [e.value for e in enum_class]
        raise ValidationError(f"{field_name} must be one of: {valid_values}")

def validate_date(value: Any, field_name: str = "date") -> str:
    """Normalise to a YYYY-MM-DD string"""
    try:
        return to_date(value).isoformat()
    except (TypeError, ValueError, AttributeError):
        raise ValidationError(f"Invalid {field_name}: {value!r}")

def new_id() -> str:
    return str(uuid.uuid4())

def _known_fields(cls, data: Dict[str, Any]) -> Dict[str, Any]:
    names = {f.name for f in fields(cls)}
    return {k: v for k, v in data.items() if k in names}

def _unique(items: Iterable[str]) -> List[str]:
    seen = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return seen

# ===== CHAT =====

@dataclass
class ChatMessage:
    """One utterance in the ordered conversation log"""
    message_id: str
    text: str
    sender: str
    timestamp: str = field(default_factory=now_iso)
    persona: Optional[str] = None
    quick_replies: List[str] = field(default_factory=list)
    playlist: Optional[Dict[str, str]] = None
    affirmation: bool = False

    def __post_init__(self):
        # Stored logs from older clients use 'ai' for the assistant
        if self.sender == "ai":
            self.sender = Sender.ASSISTANT.value
        self.sender = validate_enum_value(self.sender, Sender, "sender")
        if self.persona is not None:
            self.persona = validate_enum_value(self.persona, Persona, "persona")
        if not isinstance(self.text, str):
            raise ValidationError("text must be a string")
        self.quick_replies = [r for r in self.quick_replies if isinstance(r, str) and r.strip()]

    @property
    def is_user(self) -> bool:
        return self.sender == Sender.USER.value

    def without_quick_replies(self) -> "ChatMessage":
        """Copy with quick replies cleared"""
        return replace(self, quick_replies=[])

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChatMessage":
        return cls(**_known_fields(cls, data))

    @classmethod
    def create(cls, text: str, sender: Sender, persona: Optional[Persona] = None,
               quick_replies: Optional[List[str]] = None, playlist: Optional[Dict[str, str]] = None,
               affirmation: bool = False) -> "ChatMessage":
        return cls(
            message_id=new_id(),
            text=text,
            sender=sender.value,
            persona=persona.value if persona else None,
            quick_replies=list(quick_replies or []),
            playlist=playlist,
            affirmation=affirmation
        )

# ===== GAMIFICATION =====

@dataclass
class StreakRecord:
    """Consecutive-day count of one qualifying action"""
    streak_type: str
    count: int = 1
    last_date: str = field(default_factory=lambda: date.today().isoformat())

    def __post_init__(self):
        self.streak_type = validate_enum_value(self.streak_type, StreakType, "streak_type")
        if not isinstance(self.count, int) or self.count < 1:
            raise ValidationError("count must be a positive integer")
        self.last_date = validate_date(self.last_date, "last_date")

    @property
    def last_day(self) -> date:
        return date.fromisoformat(self.last_date)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StreakRecord":
        return cls(**_known_fields(cls, data))

@dataclass
class Badge:
    """Earned badge, write-once"""
    badge_id: str
    icon: str
    date_earned: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Badge":
        return cls(**_known_fields(cls, data))

# ===== JOURNEYS =====

@dataclass
class JourneyProgress:
    """Day-by-day progress through one wellness journey"""
    journey_id: str
    current_day: int = 1
    completed_tasks_by_day: Dict[int, List[str]] = field(default_factory=dict)
    started_at: str = field(default_factory=now_iso)

    def __post_init__(self):
        if not isinstance(self.current_day, int) or self.current_day < 1:
            raise ValidationError("current_day must be a positive integer")
        self.completed_tasks_by_day = {
            int(day): _unique(task_ids)
            for day, task_ids in self.completed_tasks_by_day.items()
        }

    def completed_on(self, day: int) -> List[str]:
        return list(self.completed_tasks_by_day.get(day, []))

    def is_task_completed(self, day: int, task_id: str) -> bool:
        return task_id in self.completed_tasks_by_day.get(day, [])

    def to_dict(self) -> Dict[str, Any]:
        return {
            'journey_id': self.journey_id,
            'current_day': self.current_day,
            # JSON object keys are strings
            'completed_tasks_by_day': {str(day): list(ids) for day, ids in self.completed_tasks_by_day.items()},
            'started_at': self.started_at
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JourneyProgress":
        return cls(**_known_fields(cls, data))

# ===== INTENTIONS =====

@dataclass
class Intention:
    """Daily or weekly intention with its completion dates"""
    intention_id: str
    title: str
    frequency: str = IntentionFrequency.DAILY.value
    target: int = 1
    completed_dates: List[str] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        self.frequency = validate_enum_value(self.frequency, IntentionFrequency, "frequency")
        if not isinstance(self.target, int) or self.target < 1:
            raise ValidationError("target must be an integer >= 1")
        if self.frequency == IntentionFrequency.DAILY.value:
            self.target = 1
        self.completed_dates = _unique(validate_date(d, "completed date") for d in self.completed_dates)

    @property
    def is_weekly(self) -> bool:
        return self.frequency == IntentionFrequency.WEEKLY.value

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Intention":
        return cls(**_known_fields(cls, data))

# ===== MOOD & JOURNAL =====

@dataclass
class MoodLog:
    """Mood check-in for one day"""
    log_id: str
    date: str
    mood: str
    source: str = MoodSource.CHECK_IN.value
    activities: List[str] = field(default_factory=list)
    people: List[str] = field(default_factory=list)
    note: Optional[str] = None

    def __post_init__(self):
        self.date = validate_date(self.date)
        if self.mood not in MOOD_OPTIONS:
            raise ValidationError(f"mood must be one of: {MOOD_OPTIONS}")
        self.source = validate_enum_value(self.source, MoodSource, "source")
        if self.note is not None:
            self.note = validate_text(self.note, min_length=0, max_length=500, field_name="note")

    @property
    def mood_score(self) -> int:
        """1 (sad) to 5 (happy)"""
        return MOOD_OPTIONS.index(self.mood) + 1

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MoodLog":
        return cls(**_known_fields(cls, data))

@dataclass
class JournalEntry:
    """Journal entry"""
    entry_id: str
    content: str
    mood: str
    prompt: str = ""
    date: str = field(default_factory=now_iso)

    def __post_init__(self):
        self.content = validate_text(self.content, min_length=1, max_length=10000, field_name="content")
        if self.mood not in MOOD_OPTIONS:
            raise ValidationError(f"mood must be one of: {MOOD_OPTIONS}")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "JournalEntry":
        return cls(**_known_fields(cls, data))

# ===== COMMUNITY =====

@dataclass
class CirclePost:
    """Community circle post"""
    post_id: str
    circle_id: str
    author_id: str
    author_name: str
    title: str
    content: str
    timestamp: str = field(default_factory=now_iso)
    likes: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.title = validate_text(self.title, min_length=1, max_length=200, field_name="title")
        self.content = validate_text(self.content, min_length=1, max_length=5000, field_name="content")
        self.likes = _unique(self.likes)

    def toggle_like(self, user_id: str) -> bool:
        """Toggle membership; returns True when now liked"""
        if user_id in self.likes:
            self.likes.remove(user_id)
            return False
        self.likes.append(user_id)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CirclePost":
        return cls(**_known_fields(cls, data))

@dataclass
class CircleComment:
    """Comment on a community post"""
    comment_id: str
    post_id: str
    author_id: str
    author_name: str
    content: str
    timestamp: str = field(default_factory=now_iso)
    likes: List[str] = field(default_factory=list)

    def __post_init__(self):
        self.content = validate_text(self.content, min_length=1, max_length=2000, field_name="content")
        self.likes = _unique(self.likes)

    def toggle_like(self, user_id: str) -> bool:
        if user_id in self.likes:
            self.likes.remove(user_id)
            return False
        self.likes.append(user_id)
        return True

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CircleComment":
        return cls(**_known_fields(cls, data))

# ===== USER & SAFETY NET =====

@dataclass
class EmergencyContact:
    """Trusted contact"""
    contact_id: str
    name: str
    phone: str
    relationship: Optional[str] = None

    def __post_init__(self):
        self.name = validate_text(self.name, min_length=1, max_length=100, field_name="name")
        self.phone = validate_text(self.phone, min_length=3, max_length=30, field_name="phone")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmergencyContact":
        return cls(**_known_fields(cls, data))

@dataclass
class EmergencyLog:
    """Record of a helpline tap"""
    log_id: str
    action: str = "helpline_tap"
    timestamp: str = field(default_factory=now_iso)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EmergencyLog":
        return cls(**_known_fields(cls, data))

@dataclass
class User:
    """Signed-in user"""
    uid: str
    name: str
    email: Optional[str] = None
    avatar: Optional[str] = None
    is_anonymous: bool = False

    def __post_init__(self):
        if not self.uid:
            raise ValidationError("uid is required")

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(**_known_fields(cls, data))

__all__ = [
    'RiskTier', 'Persona', 'Sender', 'StreakType', 'IntentionFrequency',
    'MoodSource', 'WellnessTaskType', 'MOOD_OPTIONS',
    'ValidationError', 'validate_text', 'validate_enum_value', 'validate_date', 'new_id',
    'ChatMessage', 'StreakRecord', 'Badge', 'JourneyProgress', 'Intention',
    'MoodLog', 'JournalEntry', 'CirclePost', 'CircleComment',
    'EmergencyContact', 'EmergencyLog', 'User'
]
