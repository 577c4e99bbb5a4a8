"""Shared fixtures: a scripted oracle, record stores and fixed dates."""

import asyncio
from datetime import date
from typing import Any, Callable, Dict, List, Union

import pytest

from sahaayak.core.models import User
from sahaayak.core.oracle import OracleProvider, OracleRequest, OracleResponse, TextOracle
from sahaayak.core.crisis import CRISIS_DETECTION_PROMPT
from sahaayak.core.personas import PERSONA_SELECTION_PROMPT
from sahaayak.core.moderation import MODERATION_PROMPT
from sahaayak.core.insights import ANALYSIS_PROMPT, GOAL_PROMPT, JOURNAL_PROMPT_PROMPT, SUGGESTION_PROMPT
from sahaayak.core.database import JsonFileRecordStore, MemoryRecordStore
from sahaayak.core.session import AppSession, CompanionSettings

Reply = Union[str, Exception, Callable[[OracleRequest], str]]

ROUTES = {
    'crisis': CRISIS_DETECTION_PROMPT,
    'persona': PERSONA_SELECTION_PROMPT,
    'moderation': MODERATION_PROMPT,
    'analysis': ANALYSIS_PROMPT,
    'suggestion': SUGGESTION_PROMPT,
    'journal_prompt': JOURNAL_PROMPT_PROMPT,
    'goals': GOAL_PROMPT,
}

MONDAY = date(2026, 10, 12)

class ScriptedOracle(TextOracle):
    """Answers by prompt kind; every call is recorded as (kind, request)"""

    provider = OracleProvider.OPENAI

    def __init__(self, **replies: Reply):
        super().__init__()
        self.replies: Dict[str, Reply] = {
            'crisis': "none",
            'persona': "default",
            'moderation': '{"is_safe": true}',
            'reply': "I'm here for you.",
        }
        self.replies.update(replies)
        self.calls: List[tuple] = []

    @property
    def available(self) -> bool:
        return True

    def kind_of(self, request: OracleRequest) -> str:
        for kind, prompt in ROUTES.items():
            if request.system_prompt.startswith(prompt):
                return kind
        return 'reply'

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.calls]

    async def complete(self, request: OracleRequest) -> OracleResponse:
        kind = self.kind_of(request)
        self.calls.append((kind, request))
        reply = self.replies.get(kind, "")

        if isinstance(reply, Exception):
            self.stats.record_failure()
            raise reply
        if callable(reply):
            reply = reply(request)

        response = OracleResponse(text=reply, provider=self.provider, tokens_used=10, response_time_ms=5)
        self.stats.record_success(response)
        return response

def run(coro) -> Any:
    return asyncio.run(coro)

@pytest.fixture
def oracle() -> ScriptedOracle:
    return ScriptedOracle()

@pytest.fixture
def store() -> MemoryRecordStore:
    return MemoryRecordStore()

@pytest.fixture
def json_store(tmp_path) -> JsonFileRecordStore:
    return JsonFileRecordStore(tmp_path / "store.json", backup_dir=tmp_path / "backups", max_backups=3)

@pytest.fixture
def monday() -> date:
    return MONDAY

@pytest.fixture
def make_session(store):
    def factory(oracle=None, user_id="user-1", **settings) -> AppSession:
        session = AppSession(
            store,
            oracle=oracle,
            settings=CompanionSettings(**settings) if settings else None,
            tz_name="Asia/Kolkata"
        )
        if user_id:
            session.login(User(uid=user_id, name="Asha"))
        return session
    return factory
