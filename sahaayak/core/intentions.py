#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Intentions
Daily and weekly intentions with per-period completion

Version: 1.0.0
Date: 2026-10-19
"""

from datetime import date
from typing import List, Optional, Union
import logging

from sahaayak.core.models import Intention, IntentionFrequency, new_id
from sahaayak.core.database import KeyedRecordStore
from sahaayak.utils.datetime_utils import add_days, to_date, week_start

logger = logging.getLogger(__name__)

INTENTIONS_COLLECTION = "intentions"

def progress(intention: Intention, today: Union[date, str]) -> int:
    """Completions counted for the period containing today"""
    day = to_date(today)
    if not intention.is_weekly:
        return 1 if day.isoformat() in intention.completed_dates else 0

    start = week_start(day)
    end = add_days(start, 6)
    return sum(1 for d in intention.completed_dates if start <= to_date(d) <= end)

def is_done_for_period(intention: Intention, today: Union[date, str]) -> bool:
    return progress(intention, today) >= intention.target

class IntentionTracker:
    """Intention CRUD and completion for one store"""

    def __init__(self, store: KeyedRecordStore):
        self.store = store

    def get_all(self, user_id: str) -> List[Intention]:
        return [
            Intention.from_dict(data)
            for data in self.store.get_all(INTENTIONS_COLLECTION, user_id, order_by='created_at')
        ]

    def get(self, user_id: str, intention_id: str) -> Optional[Intention]:
        data = self.store.get(INTENTIONS_COLLECTION, intention_id, user_id)
        return Intention.from_dict(data) if data else None

    def add(self, user_id: str, title: str, frequency: Union[IntentionFrequency, str] = IntentionFrequency.DAILY,
            target: int = 1) -> Intention:
        """Create an intention; daily intentions always target 1"""
        intention = Intention(intention_id=new_id(), title=title, frequency=frequency, target=target)
        self.store.set(INTENTIONS_COLLECTION, intention.intention_id, intention.to_dict(), user_id)
        logger.info(f"User {user_id} added {intention.frequency} intention {intention.intention_id}")
        return intention

    def delete(self, user_id: str, intention_id: str) -> bool:
        return self.store.delete(INTENTIONS_COLLECTION, intention_id, user_id)

    def complete(self, user_id: str, intention_id: str, on_date: Union[date, str]) -> Optional[Intention]:
        """Mark on_date done; idempotent per date"""
        intention = self.get(user_id, intention_id)
        if intention is None:
            return None

        day = to_date(on_date).isoformat()
        if day in intention.completed_dates:
            return intention

        intention.completed_dates.append(day)
        self.store.set(INTENTIONS_COLLECTION, intention_id, intention.to_dict(), user_id)
        return intention

    progress = staticmethod(progress)
    is_done_for_period = staticmethod(is_done_for_period)

__all__ = ['INTENTIONS_COLLECTION', 'progress', 'is_done_for_period', 'IntentionTracker']
