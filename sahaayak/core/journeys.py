#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Journey Progress
Day-by-day progress through multi-day wellness journeys

Version: 1.0.0
Date: 2026-10-19
"""

from typing import Dict, Optional, Any
import logging

from sahaayak.core.models import JourneyProgress
from sahaayak.core.catalog import JourneyDay, WellnessJourney, get_journey
from sahaayak.core.achievements import StreakEngine
from sahaayak.core.database import KeyedRecordStore

logger = logging.getLogger(__name__)

JOURNEYS_COLLECTION = "journey_progress"

class JourneyEngine:
    """Start, complete tasks and advance days of wellness journeys"""

    def __init__(self, store: KeyedRecordStore, streaks: StreakEngine):
        self.store = store
        self.streaks = streaks

    # ----- reads -----

    def get_progress(self, user_id: str, journey_id: str) -> Optional[JourneyProgress]:
        data = self.store.get(JOURNEYS_COLLECTION, journey_id, user_id)
        return JourneyProgress.from_dict(data) if data else None

    def get_all_progress(self, user_id: str) -> Dict[str, JourneyProgress]:
        return {
            data['journey_id']: JourneyProgress.from_dict(data)
            for data in self.store.get_all(JOURNEYS_COLLECTION, user_id, order_by='started_at')
        }

    def get_day_plan(self, journey_id: str, day: int) -> Optional[JourneyDay]:
        journey = get_journey(journey_id)
        return journey.get_day(day) if journey else None

    def is_day_complete(self, user_id: str, journey_id: str, day: int) -> bool:
        """Every task of day is checked off"""
        plan = self.get_day_plan(journey_id, day)
        progress = self.get_progress(user_id, journey_id)
        if plan is None or progress is None:
            return False
        return all(progress.is_task_completed(day, task_id) for task_id in plan.task_ids)

    def is_completed(self, user_id: str, journey_id: str) -> bool:
        """Past the last day, or on it with every task done"""
        journey = get_journey(journey_id)
        progress = self.get_progress(user_id, journey_id)
        if journey is None or progress is None:
            return False

        if progress.current_day > journey.length:
            return True

        if progress.current_day == journey.length:
            return self.is_day_complete(user_id, journey_id, journey.length)

        return False

    def active_journey(self, user_id: str) -> Optional[WellnessJourney]:
        """First started journey that is not past its last day"""
        for journey_id, progress in self.get_all_progress(user_id).items():
            journey = get_journey(journey_id)
            if journey and progress.current_day <= journey.length:
                return journey
        return None

    # ----- writes -----

    def start(self, user_id: str, journey_id: str) -> JourneyProgress:
        """Begin a journey at day 1; idempotent"""
        existing = self.get_progress(user_id, journey_id)
        if existing is not None:
            return existing

        if get_journey(journey_id) is None:
            logger.warning(f"Starting unknown journey: {journey_id}")

        progress = JourneyProgress(journey_id=journey_id)
        self._save(user_id, progress)
        logger.info(f"User {user_id} started journey {journey_id}")
        return progress

    def complete_task(self, user_id: str, journey_id: str, day: int, task_id: str) -> Optional[JourneyProgress]:
        """Check off one task; no-op when the journey was never started"""
        progress = self.get_progress(user_id, journey_id)
        if progress is None:
            logger.debug(f"Task {task_id} ignored: journey {journey_id} not started")
            return None

        if progress.is_task_completed(day, task_id):
            return progress

        progress.completed_tasks_by_day.setdefault(day, []).append(task_id)
        self._save(user_id, progress)
        return progress

    def advance_day(self, user_id: str, journey_id: str) -> Optional[JourneyProgress]:
        """Move to the next day; leaving the last day earns the completion badge.

        The UI gates this on is_day_complete; the engine advances unconditionally.
        """
        progress = self.get_progress(user_id, journey_id)
        if progress is None:
            return None

        journey = get_journey(journey_id)
        if journey and progress.current_day == journey.length:
            self.streaks.award_badge(user_id, journey.completion_badge_id)

        progress.current_day += 1
        self._save(user_id, progress)
        logger.info(f"User {user_id} advanced {journey_id} to day {progress.current_day}")
        return progress

    def _save(self, user_id: str, progress: JourneyProgress) -> None:
        self.store.set(JOURNEYS_COLLECTION, progress.journey_id, progress.to_dict(), user_id)

    def describe(self, user_id: str, journey_id: str) -> Optional[Dict[str, Any]]:
        """Journey, progress and today's plan in one payload"""
        journey = get_journey(journey_id)
        if journey is None:
            return None

        progress = self.get_progress(user_id, journey_id)
        current_plan = journey.get_day(progress.current_day) if progress else None
        return {
            'journey': journey.to_dict(),
            'progress': progress.to_dict() if progress else None,
            'current_day_plan': current_plan.to_dict() if current_plan else None,
            'current_day_complete': (
                self.is_day_complete(user_id, journey_id, progress.current_day) if progress else False
            ),
            'completed': self.is_completed(user_id, journey_id)
        }

__all__ = ['JOURNEYS_COLLECTION', 'JourneyEngine']
