#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - API Dependencies
Shared components and per-user session providers for the FastAPI application

Version: 1.0.0
Date: 2026-10-19
"""

import threading
from typing import Dict, Optional, Any
import logging

from fastapi import Header, Request

from sahaayak.core.models import Persona, User
from sahaayak.core.oracle import TextOracle
from sahaayak.core.crisis import CrisisClassifier
from sahaayak.core.moderation import ContentModerator
from sahaayak.core.orchestrator import ConversationOrchestrator
from sahaayak.core.insights import WellnessInsights
from sahaayak.core.database import KeyedRecordStore
from sahaayak.core.session import AppSession, CompanionSettings

logger = logging.getLogger(__name__)

class SessionRegistry:
    """One AppSession per signed-in user; components shared across sessions"""

    def __init__(self, store: KeyedRecordStore, oracle: TextOracle, app_config=None):
        if app_config is None:
            from sahaayak.config import config as app_config

        self.store = store
        self.oracle = oracle
        self.tz_name = app_config.behaviour.timezone
        self.default_settings = CompanionSettings(
            selected_persona=Persona(app_config.behaviour.default_persona).value,
            dynamic_persona_enabled=app_config.behaviour.dynamic_persona_default
        )

        self.orchestrator = ConversationOrchestrator(
            oracle,
            classifier=CrisisClassifier(oracle, draft_min_length=app_config.behaviour.draft_screen_min_length)
        )
        self.moderator = ContentModerator(oracle)
        self.insights = WellnessInsights(oracle)

        self._sessions: Dict[str, AppSession] = {}
        self._lock = threading.Lock()

    def new_session(self) -> AppSession:
        return AppSession(
            self.store,
            oracle=self.oracle,
            orchestrator=self.orchestrator,
            moderator=self.moderator,
            insights=self.insights,
            settings=self.default_settings,
            tz_name=self.tz_name
        )

    def get_session(self, user_id: Optional[str], user_name: Optional[str] = None) -> AppSession:
        """Signed-in session for user_id, or a throwaway guest session"""
        if not user_id:
            return self.new_session()

        with self._lock:
            session = self._sessions.get(user_id)
            if session is None or not session.is_authenticated:
                session = self.new_session()
                session.login(User(uid=user_id, name=user_name or "Friend"))
                self._sessions[user_id] = session
                logger.info(f"📱 Session opened for {user_id}")
            return session

    def drop_session(self, user_id: str) -> None:
        with self._lock:
            self._sessions.pop(user_id, None)

    @property
    def active_sessions(self) -> int:
        return len(self._sessions)

    def get_stats(self) -> Dict[str, Any]:
        return {
            'active_sessions': self.active_sessions,
            'orchestrator': self.orchestrator.get_stats(),
            'moderation': self.moderator.get_stats(),
            'store': self.store.get_stats()
        }

# ===== PROVIDERS =====

def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry

def get_session(
    request: Request,
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None)
) -> AppSession:
    """Session for the X-User-Id header; guest when missing"""
    return get_registry(request).get_session(x_user_id, x_user_name)

__all__ = ['SessionRegistry', 'get_registry', 'get_session']
