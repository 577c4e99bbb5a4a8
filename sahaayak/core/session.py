#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Application Session
Per-user application state and the mutation API that persists it

Version: 1.0.0
Date: 2026-10-19
"""

import random
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Any, Union
import logging

from sahaayak.core.models import (
    Badge, ChatMessage, CircleComment, CirclePost, EmergencyContact, EmergencyLog,
    Intention, IntentionFrequency, JournalEntry, JourneyProgress, MoodLog, MoodSource,
    Persona, Sender, StreakRecord, StreakType, User, ValidationError, new_id, validate_text
)
from sahaayak.core.catalog import ANONYMOUS_ADJECTIVES, ANONYMOUS_NOUNS, get_circle
from sahaayak.core.database import KeyedRecordStore
from sahaayak.core.oracle import TextOracle, UnavailableOracle
from sahaayak.core.crisis import DraftScreening
from sahaayak.core.moderation import ContentModerator, ModerationResult
from sahaayak.core.orchestrator import ConversationOrchestrator, TurnResult
from sahaayak.core.achievements import StreakEngine, StreakUpdate
from sahaayak.core.journeys import JourneyEngine
from sahaayak.core.intentions import IntentionTracker
from sahaayak.core.insights import Analysis, Suggestion, WellnessInsights
from sahaayak.utils.datetime_utils import now_iso, to_date, today_local

logger = logging.getLogger(__name__)

PROFILE_COLLECTION = "profile"
SETTINGS_COLLECTION = "settings"
MOOD_LOGS_COLLECTION = "mood_logs"
JOURNAL_COLLECTION = "journal_entries"
CHAT_COLLECTION = "chat_messages"
CONTACTS_COLLECTION = "emergency_contacts"
EMERGENCY_LOGS_COLLECTION = "emergency_logs"
POSTS_COLLECTION = "posts"
COMMENTS_COLLECTION = "comments"

PROFILE_ID = "user"
PREFERENCES_ID = "preferences"

# ===== EXCEPTIONS =====

class TurnInProgressError(Exception):
    """A chat submission arrived while the previous one is still being answered"""
    pass

# ===== DATA CLASSES =====

@dataclass
class CompanionSettings:
    """Persona preferences"""
    selected_persona: str = Persona.EMPATHETIC.value
    dynamic_persona_enabled: bool = True

    @property
    def persona(self) -> Persona:
        return Persona(self.selected_persona)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'selected_persona': self.selected_persona,
            'dynamic_persona_enabled': self.dynamic_persona_enabled
        }

@dataclass
class CommunityResult:
    """Outcome of a moderated community write"""
    success: bool
    message: str
    record: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'success': self.success, 'message': self.message, 'record': self.record}

@dataclass
class SessionState:
    """In-memory slices of one signed-in user"""
    mood_logs: List[MoodLog] = field(default_factory=list)
    journal_entries: List[JournalEntry] = field(default_factory=list)
    chat_messages: List[ChatMessage] = field(default_factory=list)
    emergency_contacts: List[EmergencyContact] = field(default_factory=list)
    emergency_logs: List[EmergencyLog] = field(default_factory=list)
    streaks: Dict[str, StreakRecord] = field(default_factory=dict)
    badges: List[Badge] = field(default_factory=list)
    journey_progress: Dict[str, JourneyProgress] = field(default_factory=dict)
    intentions: List[Intention] = field(default_factory=list)

def generate_anonymous_name(rng: Optional[random.Random] = None) -> str:
    """'<Adjective> <Noun>' community display name"""
    rng = rng or random.Random()
    return f"{rng.choice(ANONYMOUS_ADJECTIVES)} {rng.choice(ANONYMOUS_NOUNS)}"

# ===== SESSION =====

class AppSession:
    """Application state for one client; the only path to persistence"""

    def __init__(self, store: KeyedRecordStore, oracle: Optional[TextOracle] = None,
                 orchestrator: Optional[ConversationOrchestrator] = None,
                 moderator: Optional[ContentModerator] = None,
                 insights: Optional[WellnessInsights] = None,
                 settings: Optional[CompanionSettings] = None,
                 tz_name: Optional[str] = None,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.oracle = oracle or UnavailableOracle()
        self.orchestrator = orchestrator or ConversationOrchestrator(self.oracle)
        self.moderator = moderator or ContentModerator(self.oracle)
        self.insights = insights or WellnessInsights(self.oracle)
        self.streak_engine = StreakEngine(store)
        self.journey_engine = JourneyEngine(store, self.streak_engine)
        self.intention_tracker = IntentionTracker(store)

        self.tz_name = tz_name
        self.default_settings = settings or CompanionSettings()
        self.settings = CompanionSettings(**self.default_settings.to_dict())
        self.anonymous_name = generate_anonymous_name(rng)

        self.user: Optional[User] = None
        self.state = SessionState()
        self.new_badges: List[Badge] = []
        self._turn_in_progress = False

    # ===== IDENTITY =====

    @property
    def user_id(self) -> Optional[str]:
        return self.user.uid if self.user else None

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    def today(self) -> date:
        return today_local(self.tz_name)

    def login(self, user: User) -> None:
        """Sign in and load every slice of the user"""
        self.user = user
        self.store.set(PROFILE_COLLECTION, PROFILE_ID, user.to_dict(), user.uid)
        self._load_state()
        logger.info(f"User {user.uid} signed in")

    def logout(self) -> None:
        """Forget in-memory state; stored data stays"""
        if self.user:
            logger.info(f"User {self.user.uid} signed out")
        self.user = None
        self.state = SessionState()
        self.settings = CompanionSettings(**self.default_settings.to_dict())
        self.new_badges = []

    def _load_state(self) -> None:
        uid = self.user_id
        preferences = self.store.get(SETTINGS_COLLECTION, PREFERENCES_ID, uid)
        if preferences:
            self.settings = CompanionSettings(**preferences)

        self.state = SessionState(
            mood_logs=[MoodLog.from_dict(d) for d in self.store.get_all(MOOD_LOGS_COLLECTION, uid, order_by='date')],
            journal_entries=[
                JournalEntry.from_dict(d)
                for d in self.store.get_all(JOURNAL_COLLECTION, uid, order_by='date', descending=True)
            ],
            chat_messages=[
                ChatMessage.from_dict(d) for d in self.store.get_all(CHAT_COLLECTION, uid, order_by='timestamp')
            ],
            emergency_contacts=[EmergencyContact.from_dict(d) for d in self.store.get_all(CONTACTS_COLLECTION, uid)],
            emergency_logs=[
                EmergencyLog.from_dict(d)
                for d in self.store.get_all(EMERGENCY_LOGS_COLLECTION, uid, order_by='timestamp')
            ]
        )
        self._refresh_gamification()
        self._refresh_journeys()
        self._refresh_intentions()

    def _refresh_gamification(self) -> None:
        self.state.streaks = self.streak_engine.get_streaks(self.user_id)
        self.state.badges = self.streak_engine.get_badges(self.user_id)

    def _refresh_journeys(self) -> None:
        self.state.journey_progress = self.journey_engine.get_all_progress(self.user_id)

    def _refresh_intentions(self) -> None:
        self.state.intentions = self.intention_tracker.get_all(self.user_id)

    def _collect_badges(self, update: StreakUpdate) -> None:
        self.new_badges.extend(update.newly_earned_badges)

    def pop_new_badges(self) -> List[Badge]:
        """Badges earned since the last call"""
        badges, self.new_badges = self.new_badges, []
        return badges

    # ===== SETTINGS =====

    def set_persona(self, persona: Union[Persona, str]) -> None:
        self.settings.selected_persona = Persona(persona).value
        self._save_settings()

    def set_dynamic_persona_enabled(self, enabled: bool) -> None:
        self.settings.dynamic_persona_enabled = bool(enabled)
        self._save_settings()

    def _save_settings(self) -> None:
        if self.user_id:
            self.store.set(SETTINGS_COLLECTION, PREFERENCES_ID, self.settings.to_dict(), self.user_id)

    # ===== MOOD & JOURNAL =====

    def add_mood_log(self, mood: str, on_date: Optional[Union[date, str]] = None,
                     source: Union[MoodSource, str] = MoodSource.CHECK_IN,
                     activities: Optional[List[str]] = None, people: Optional[List[str]] = None,
                     note: Optional[str] = None) -> Optional[MoodLog]:
        """Log a mood; replaces the log of the same day and source"""
        if not self.user_id:
            return None

        day = to_date(on_date) if on_date else self.today()
        log = MoodLog(
            log_id=new_id(), date=day.isoformat(), mood=mood, source=source,
            activities=list(activities or []), people=list(people or []), note=note
        )

        for existing in [l for l in self.state.mood_logs if l.date == log.date and l.source == log.source]:
            self.store.delete(MOOD_LOGS_COLLECTION, existing.log_id, self.user_id)
            self.state.mood_logs.remove(existing)

        self.store.set(MOOD_LOGS_COLLECTION, log.log_id, log.to_dict(), self.user_id)
        self.state.mood_logs.append(log)

        self._collect_badges(self.streak_engine.record_action(self.user_id, StreakType.MOOD_TRACKING, day))
        self._refresh_gamification()
        return log

    def add_journal_entry(self, content: str, mood: str, prompt: str = "",
                          on_date: Optional[Union[date, str]] = None) -> Optional[JournalEntry]:
        """Save an entry; also logs its mood and advances the journaling streak"""
        if not self.user_id:
            return None

        day = to_date(on_date) if on_date else self.today()
        entry = JournalEntry(
            entry_id=new_id(), content=content, mood=mood, prompt=prompt,
            date=day.isoformat() if on_date else now_iso()
        )
        self.store.set(JOURNAL_COLLECTION, entry.entry_id, entry.to_dict(), self.user_id)
        self.state.journal_entries.insert(0, entry)

        self._collect_badges(self.streak_engine.record_action(self.user_id, StreakType.JOURNALING, day))
        self.add_mood_log(mood, on_date=day, source=MoodSource.JOURNAL)
        return entry

    # ===== CHAT =====

    async def submit_message(self, text: str) -> TurnResult:
        """Run one conversation turn and persist it.

        Guests get a reply but nothing is stored. Crisis turns store only the user message.
        """
        text = validate_text(text, max_length=4000, field_name="message")
        if self._turn_in_progress:
            raise TurnInProgressError("A message is already being answered")

        self._turn_in_progress = True
        try:
            history = self._clear_quick_replies()
            user_message = ChatMessage.create(text=text, sender=Sender.USER)
            self._append_chat(user_message)

            result = await self.orchestrator.respond(
                text, history, self.settings.persona, self.settings.dynamic_persona_enabled
            )

            if result.is_crisis:
                logger.warning("Crisis response shown to the user")
            else:
                self._append_chat(result.to_message())
            return result
        finally:
            self._turn_in_progress = False

    def _clear_quick_replies(self) -> List[ChatMessage]:
        cleared = []
        for message in self.state.chat_messages:
            if message.quick_replies:
                message = message.without_quick_replies()
                if self.user_id:
                    self.store.set(CHAT_COLLECTION, message.message_id, message.to_dict(), self.user_id)
            cleared.append(message)
        self.state.chat_messages = cleared
        return list(cleared)

    def _append_chat(self, message: ChatMessage) -> None:
        if not self.user_id:
            return
        self.state.chat_messages.append(message)
        self.store.set(CHAT_COLLECTION, message.message_id, message.to_dict(), self.user_id)

    async def screen_draft(self, text: str) -> DraftScreening:
        return await self.orchestrator.classifier.screen_draft(text)

    # ===== JOURNEYS =====

    def start_journey(self, journey_id: str) -> Optional[JourneyProgress]:
        if not self.user_id:
            return None
        progress = self.journey_engine.start(self.user_id, journey_id)
        self._refresh_journeys()
        return progress

    def complete_journey_task(self, journey_id: str, day: int, task_id: str) -> Optional[JourneyProgress]:
        if not self.user_id:
            return None
        progress = self.journey_engine.complete_task(self.user_id, journey_id, day, task_id)
        self._refresh_journeys()
        return progress

    def advance_journey_day(self, journey_id: str) -> Optional[JourneyProgress]:
        if not self.user_id:
            return None
        had = {b.badge_id for b in self.state.badges}
        progress = self.journey_engine.advance_day(self.user_id, journey_id)
        self._refresh_journeys()
        self._refresh_gamification()
        self.new_badges.extend(b for b in self.state.badges if b.badge_id not in had)
        return progress

    def is_journey_completed(self, journey_id: str) -> bool:
        if not self.user_id:
            return False
        return self.journey_engine.is_completed(self.user_id, journey_id)

    # ===== INTENTIONS =====

    def add_intention(self, title: str, frequency: Union[IntentionFrequency, str] = IntentionFrequency.DAILY,
                      target: int = 1) -> Optional[Intention]:
        if not self.user_id:
            return None
        intention = self.intention_tracker.add(self.user_id, title, frequency, target)
        self._refresh_intentions()
        return intention

    def delete_intention(self, intention_id: str) -> bool:
        if not self.user_id:
            return False
        deleted = self.intention_tracker.delete(self.user_id, intention_id)
        self._refresh_intentions()
        return deleted

    def complete_intention(self, intention_id: str, on_date: Optional[Union[date, str]] = None) -> Optional[Intention]:
        if not self.user_id:
            return None
        intention = self.intention_tracker.complete(self.user_id, intention_id, on_date or self.today())
        self._refresh_intentions()
        return intention

    def intention_progress(self) -> List[Dict[str, Any]]:
        today = self.today()
        return [
            {
                'intention': intention.to_dict(),
                'progress': self.intention_tracker.progress(intention, today),
                'done': self.intention_tracker.is_done_for_period(intention, today)
            }
            for intention in self.state.intentions
        ]

    # ===== COMMUNITY =====

    def get_posts(self, circle_id: Optional[str] = None) -> List[CirclePost]:
        posts = [CirclePost.from_dict(d) for d in self.store.get_all(POSTS_COLLECTION, order_by='timestamp', descending=True)]
        if circle_id:
            posts = [p for p in posts if p.circle_id == circle_id]
        return posts

    def get_comments(self, post_id: str) -> List[CircleComment]:
        comments = [CircleComment.from_dict(d) for d in self.store.get_all(COMMENTS_COLLECTION, order_by='timestamp')]
        return [c for c in comments if c.post_id == post_id]

    async def add_post(self, circle_id: str, title: str, content: str) -> CommunityResult:
        """Moderate then publish a post under the anonymous name"""
        if not self.user_id:
            return CommunityResult(success=False, message="Sign in to post.")
        if get_circle(circle_id) is None:
            raise ValidationError(f"Unknown circle: {circle_id}")

        post = CirclePost(
            post_id=new_id(), circle_id=circle_id, author_id=self.user_id,
            author_name=self.anonymous_name, title=title, content=content
        )
        verdict = await self.moderator.moderate(f"{post.title} {post.content}")
        if not verdict.is_safe:
            return self._rejected(verdict)

        self.store.set(POSTS_COLLECTION, post.post_id, post.to_dict())
        return CommunityResult(success=True, message="Post added successfully.", record=post.to_dict())

    async def add_comment(self, post_id: str, content: str) -> CommunityResult:
        if not self.user_id:
            return CommunityResult(success=False, message="Sign in to comment.")
        if self.store.get(POSTS_COLLECTION, post_id) is None:
            raise ValidationError(f"Unknown post: {post_id}")

        comment = CircleComment(
            comment_id=new_id(), post_id=post_id, author_id=self.user_id,
            author_name=self.anonymous_name, content=content
        )
        verdict = await self.moderator.moderate(comment.content)
        if not verdict.is_safe:
            return self._rejected(verdict)

        self.store.set(COMMENTS_COLLECTION, comment.comment_id, comment.to_dict())
        return CommunityResult(success=True, message="Comment added successfully.", record=comment.to_dict())

    @staticmethod
    def _rejected(verdict: ModerationResult) -> CommunityResult:
        return CommunityResult(success=False, message=verdict.reason or "Content is not allowed.")

    def toggle_post_like(self, post_id: str) -> Optional[CirclePost]:
        if not self.user_id:
            return None
        data = self.store.get(POSTS_COLLECTION, post_id)
        if data is None:
            return None
        post = CirclePost.from_dict(data)
        post.toggle_like(self.user_id)
        self.store.set(POSTS_COLLECTION, post_id, post.to_dict())
        return post

    def toggle_comment_like(self, comment_id: str) -> Optional[CircleComment]:
        if not self.user_id:
            return None
        data = self.store.get(COMMENTS_COLLECTION, comment_id)
        if data is None:
            return None
        comment = CircleComment.from_dict(data)
        comment.toggle_like(self.user_id)
        self.store.set(COMMENTS_COLLECTION, comment_id, comment.to_dict())
        return comment

    # ===== SAFETY NET =====

    def add_emergency_contact(self, name: str, phone: str, relationship: Optional[str] = None) -> Optional[EmergencyContact]:
        if not self.user_id:
            return None
        contact = EmergencyContact(contact_id=new_id(), name=name, phone=phone, relationship=relationship)
        self.store.set(CONTACTS_COLLECTION, contact.contact_id, contact.to_dict(), self.user_id)
        self.state.emergency_contacts.append(contact)
        return contact

    def update_emergency_contact(self, contact: EmergencyContact) -> bool:
        if not self.user_id:
            return False
        for index, existing in enumerate(self.state.emergency_contacts):
            if existing.contact_id == contact.contact_id:
                self.state.emergency_contacts[index] = contact
                self.store.set(CONTACTS_COLLECTION, contact.contact_id, contact.to_dict(), self.user_id)
                return True
        return False

    def delete_emergency_contact(self, contact_id: str) -> bool:
        if not self.user_id:
            return False
        self.state.emergency_contacts = [c for c in self.state.emergency_contacts if c.contact_id != contact_id]
        return self.store.delete(CONTACTS_COLLECTION, contact_id, self.user_id)

    def log_emergency_action(self, action: str = "helpline_tap") -> Optional[EmergencyLog]:
        if not self.user_id:
            return None
        log = EmergencyLog(log_id=new_id(), action=action)
        self.store.set(EMERGENCY_LOGS_COLLECTION, log.log_id, log.to_dict(), self.user_id)
        self.state.emergency_logs.append(log)
        logger.info(f"Emergency action logged for {self.user_id}: {action}")
        return log

    # ===== INSIGHTS =====

    async def get_analysis(self) -> Optional[Analysis]:
        return await self.insights.analyze(self.state.journal_entries, self.state.mood_logs)

    async def get_proactive_suggestion(self) -> Optional[Suggestion]:
        journey = self.journey_engine.active_journey(self.user_id) if self.user_id else None
        current_day = self.state.journey_progress[journey.journey_id].current_day if journey else None
        return await self.insights.proactive_suggestion(
            self.state.mood_logs, self.state.journal_entries, journey, current_day
        )

    async def get_daily_journal_prompt(self) -> str:
        return await self.insights.daily_journal_prompt()

    async def get_goal_suggestions(self, goal: str) -> List[str]:
        return await self.insights.goal_suggestions(goal)

    # ===== DATA CONTROL =====

    def export_user_data(self) -> Optional[Dict[str, Any]]:
        """JSON-serialisable snapshot of everything stored for the user"""
        if not self.user:
            return None
        return {
            'user': self.user.to_dict(),
            'mood_logs': [l.to_dict() for l in self.state.mood_logs],
            'journal_entries': [e.to_dict() for e in self.state.journal_entries],
            'chat_messages': [m.to_dict() for m in self.state.chat_messages],
            'emergency_contacts': [c.to_dict() for c in self.state.emergency_contacts],
            'emergency_logs': [l.to_dict() for l in self.state.emergency_logs],
            'streaks': [s.to_dict() for s in self.state.streaks.values()],
            'badges': [b.to_dict() for b in self.state.badges],
            'journey_progress': {k: p.to_dict() for k, p in self.state.journey_progress.items()},
            'intentions': [i.to_dict() for i in self.state.intentions],
            'settings': self.settings.to_dict()
        }

    def clear_all_user_data(self) -> int:
        """Delete the user's stored collections and sign out"""
        if not self.user_id:
            return 0
        removed = self.store.clear_user(self.user_id)
        self.logout()
        return removed

__all__ = [
    'TurnInProgressError', 'CompanionSettings', 'CommunityResult', 'SessionState',
    'generate_anonymous_name', 'AppSession'
]
