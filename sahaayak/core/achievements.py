#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Streaks & Badges
Consecutive-day streaks and write-once badge awards

Version: 1.0.0
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Any, Union
import logging

from sahaayak.core.models import Badge, StreakRecord, StreakType
from sahaayak.core.catalog import WELLNESS_JOURNEYS
from sahaayak.core.database import KeyedRecordStore
from sahaayak.utils.datetime_utils import days_between, now_iso, to_date

logger = logging.getLogger(__name__)

STREAKS_COLLECTION = "streaks"
BADGES_COLLECTION = "badges"

STREAK_MILESTONES = (3, 7)

# ===== DATA CLASSES =====

@dataclass(frozen=True)
class BadgeDefinition:
    """Catalog entry for a badge"""
    badge_id: str
    icon: str
    name_key: str
    description_key: str

    def to_dict(self) -> Dict[str, str]:
        return {
            'badge_id': self.badge_id,
            'icon': self.icon,
            'name_key': self.name_key,
            'description_key': self.description_key
        }

@dataclass
class StreakUpdate:
    """Outcome of one qualifying action"""
    streak: Optional[StreakRecord]
    newly_earned_badges: List[Badge] = field(default_factory=list)
    changed: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'streak': self.streak.to_dict() if self.streak else None,
            'newly_earned_badges': [b.to_dict() for b in self.newly_earned_badges],
            'changed': self.changed
        }

# ===== REGISTRY =====

class BadgeRegistry:
    """All known badges"""

    def __init__(self):
        self.badges: Dict[str, BadgeDefinition] = {}
        self.first_badges: Dict[StreakType, str] = {}
        self.milestone_badges: Dict[StreakType, Dict[int, str]] = {}
        self._load_default_badges()

    def register_badge(self, definition: BadgeDefinition) -> None:
        self.badges[definition.badge_id] = definition
        logger.debug(f"Registered badge: {definition.badge_id}")

    def get_badge(self, badge_id: str) -> Optional[BadgeDefinition]:
        return self.badges.get(badge_id)

    def get_all_badges(self) -> List[BadgeDefinition]:
        return list(self.badges.values())

    def first_badge_for(self, streak_type: StreakType) -> Optional[str]:
        return self.first_badges.get(streak_type)

    def milestone_badge_for(self, streak_type: StreakType, count: int) -> Optional[str]:
        return self.milestone_badges.get(streak_type, {}).get(count)

    def _register_streak_badges(self, streak_type: StreakType, prefix: str, icons: Dict[str, str]) -> None:
        first_id = f"first_{prefix}"
        self.register_badge(BadgeDefinition(
            first_id, icons['first'], f"badge_{first_id}_name", f"badge_{first_id}_desc"
        ))
        self.first_badges[streak_type] = first_id

        self.milestone_badges[streak_type] = {}
        for milestone in STREAK_MILESTONES:
            badge_id = f"{prefix}_{milestone}_day"
            self.register_badge(BadgeDefinition(
                badge_id, icons[str(milestone)], f"badge_{badge_id}_name", f"badge_{badge_id}_desc"
            ))
            self.milestone_badges[streak_type][milestone] = badge_id

    def _load_default_badges(self) -> None:
        self._register_streak_badges(StreakType.JOURNALING, "journal", {'first': "🌱", '3': "✍️", '7': "✨"})
        self._register_streak_badges(StreakType.MOOD_TRACKING, "mood", {'first': "😊", '3': "📈", '7': "🌟"})

        for journey in WELLNESS_JOURNEYS:
            slug = journey.journey_id[:-len("_journey")]
            self.register_badge(BadgeDefinition(
                journey.completion_badge_id,
                journey.icon,
                f"badge_journey_{slug}_complete_name",
                f"badge_journey_{slug}_complete_desc"
            ))

# ===== ENGINE =====

class StreakEngine:
    """Derives streaks and badges from discrete user actions"""

    def __init__(self, store: KeyedRecordStore, registry: Optional[BadgeRegistry] = None):
        self.store = store
        self.registry = registry or BadgeRegistry()

    # ----- reads -----

    def get_streak(self, user_id: str, streak_type: StreakType) -> Optional[StreakRecord]:
        data = self.store.get(STREAKS_COLLECTION, streak_type.value, user_id)
        return StreakRecord.from_dict(data) if data else None

    def get_streaks(self, user_id: str) -> Dict[str, StreakRecord]:
        return {
            data['streak_type']: StreakRecord.from_dict(data)
            for data in self.store.get_all(STREAKS_COLLECTION, user_id)
        }

    def get_badges(self, user_id: str) -> List[Badge]:
        return [
            Badge.from_dict(data)
            for data in self.store.get_all(BADGES_COLLECTION, user_id, order_by='date_earned')
        ]

    def has_badge(self, user_id: str, badge_id: str) -> bool:
        return self.store.get(BADGES_COLLECTION, badge_id, user_id) is not None

    # ----- writes -----

    def award_badge(self, user_id: str, badge_id: str) -> Optional[Badge]:
        """Write-once award; returns the badge only when newly earned"""
        definition = self.registry.get_badge(badge_id)
        if definition is None:
            logger.warning(f"Ignoring unknown badge id: {badge_id}")
            return None

        if self.has_badge(user_id, badge_id):
            return None

        badge = Badge(badge_id=badge_id, icon=definition.icon, date_earned=now_iso())
        self.store.set(BADGES_COLLECTION, badge_id, badge.to_dict(), user_id)
        logger.info(f"🏆 User {user_id} earned badge: {badge_id}")
        return badge

    def record_action(self, user_id: str, streak_type: StreakType,
                      action_date: Union[date, str]) -> StreakUpdate:
        """Update the streak of streak_type for an action on action_date"""
        action_day = to_date(action_date)
        current = self.get_streak(user_id, streak_type)
        earned: List[Badge] = []

        if current is None:
            streak = StreakRecord(streak_type=streak_type.value, count=1, last_date=action_day.isoformat())
            self._save_streak(user_id, streak)
            first_badge = self.registry.first_badge_for(streak_type)
            if first_badge:
                self._collect(earned, self.award_badge(user_id, first_badge))
            return StreakUpdate(streak=streak, newly_earned_badges=earned, changed=True)

        difference = days_between(current.last_day, action_day)

        if difference == 0:
            return StreakUpdate(streak=current)

        if difference < 0:
            logger.warning(
                f"Ignoring {streak_type.value} action dated {action_day} before last streak day {current.last_date}"
            )
            return StreakUpdate(streak=current)

        count = current.count + 1 if difference == 1 else 1
        streak = StreakRecord(streak_type=streak_type.value, count=count, last_date=action_day.isoformat())
        self._save_streak(user_id, streak)

        milestone_badge = self.registry.milestone_badge_for(streak_type, count)
        if milestone_badge:
            self._collect(earned, self.award_badge(user_id, milestone_badge))

        return StreakUpdate(streak=streak, newly_earned_badges=earned, changed=True)

    def _save_streak(self, user_id: str, streak: StreakRecord) -> None:
        self.store.set(STREAKS_COLLECTION, streak.streak_type, streak.to_dict(), user_id)
        logger.debug(f"Streak {streak.streak_type} for {user_id}: {streak.count}")

    @staticmethod
    def _collect(earned: List[Badge], badge: Optional[Badge]) -> None:
        if badge is not None:
            earned.append(badge)

    def get_summary(self, user_id: str) -> Dict[str, Any]:
        """Streaks and badges of one user"""
        streaks = self.get_streaks(user_id)
        badges = self.get_badges(user_id)
        return {
            'streaks': {key: record.to_dict() for key, record in streaks.items()},
            'badges': [badge.to_dict() for badge in badges],
            'badges_total': len(self.registry.badges),
            'badges_earned': len(badges)
        }

__all__ = [
    'STREAKS_COLLECTION', 'BADGES_COLLECTION', 'STREAK_MILESTONES',
    'BadgeDefinition', 'StreakUpdate', 'BadgeRegistry', 'StreakEngine'
]
