#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Conversation Turn Orchestrator
Crisis gating, persona selection, generation and directive extraction for one turn

Version: 1.0.0
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any
from enum import Enum
import logging

from sahaayak.core.models import ChatMessage, Persona, RiskTier, Sender
from sahaayak.core.catalog import get_persona_profile
from sahaayak.core.crisis import CrisisClassifier
from sahaayak.core.personas import PersonaSelector
from sahaayak.core.directives import CRISIS_SENTINEL, Playlist, parse_reply
from sahaayak.core.oracle import TextOracle, OracleRequest

logger = logging.getLogger(__name__)

DEGRADED_REPLY_TEXT = "I'm sorry, I'm having a little trouble connecting right now. Let's try again in a moment."
CRISIS_PERSONA = Persona.EMPATHETIC

# ===== ENUMS =====

class TurnState(Enum):
    """States of one conversation turn"""
    RECEIVED = "received"
    CLASSIFYING = "classifying"
    CRISIS_RESPONSE = "crisis_response"
    SELECTING_PERSONA = "selecting_persona"
    GENERATING = "generating"
    DELIVERED = "delivered"
    DEGRADED_REPLY = "degraded_reply"

TERMINAL_STATES = {TurnState.CRISIS_RESPONSE, TurnState.DELIVERED, TurnState.DEGRADED_REPLY}

# ===== DATA CLASSES =====

@dataclass
class TurnResult:
    """Outcome of one turn"""
    text: str
    persona_used: Persona
    tier: RiskTier
    quick_replies: List[str] = field(default_factory=list)
    playlist: Optional[Playlist] = None
    affirmation: bool = False
    states: List[TurnState] = field(default_factory=list)

    @property
    def final_state(self) -> TurnState:
        return self.states[-1]

    @property
    def is_crisis(self) -> bool:
        return self.final_state == TurnState.CRISIS_RESPONSE

    @property
    def is_degraded(self) -> bool:
        return self.final_state == TurnState.DEGRADED_REPLY

    @property
    def primary_content(self) -> str:
        """Slot a single-slot renderer shows: crisis > playlist > affirmation > text"""
        if self.is_crisis:
            return "crisis"
        if self.playlist:
            return "playlist"
        if self.affirmation:
            return "affirmation"
        return "text"

    def to_message(self) -> ChatMessage:
        """Assistant chat message for the log"""
        if self.is_crisis:
            raise ValueError("Crisis results are never stored as chat messages")
        return ChatMessage.create(
            text=self.text,
            sender=Sender.ASSISTANT,
            persona=self.persona_used,
            quick_replies=self.quick_replies,
            playlist=self.playlist.to_dict() if self.playlist else None,
            affirmation=self.affirmation
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'persona_used': self.persona_used.value,
            'tier': self.tier.value,
            'quick_replies': list(self.quick_replies),
            'playlist': self.playlist.to_dict() if self.playlist else None,
            'affirmation': self.affirmation,
            'is_crisis': self.is_crisis,
            'primary_content': self.primary_content,
            'states': [state.value for state in self.states]
        }

@dataclass
class OrchestratorStats:
    total_turns: int = 0
    crisis_turns: int = 0
    degraded_turns: int = 0
    offline_turns: int = 0
    personas_used: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_turns': self.total_turns,
            'crisis_turns': self.crisis_turns,
            'degraded_turns': self.degraded_turns,
            'offline_turns': self.offline_turns,
            'personas_used': dict(self.personas_used)
        }

# ===== OFFLINE REPLIES =====

class OfflineReplyProvider:
    """Deterministic replies used while the oracle is not configured"""

    def __init__(self):
        self.replies = self._load_replies()

    def _load_replies(self) -> Dict[str, str]:
        return {
            'supportive': (
                "Thank you for sharing. I'm here to listen. Remember to be kind to yourself.\n"
                "[QUICK_REPLIES:Tell me more|Thanks|Okay]"
            ),
            'playlist': "[PLAYLIST:Calming Acoustic Guitar|https://www.youtube.com/watch?v=5qap5aO4i9A]",
            'affirmation': "[AFFIRMATION] You are resilient and can get through this."
        }

    def get_reply(self, persona: Persona) -> str:
        if persona in (Persona.CALM, Persona.MINDFUL):
            return self.replies['playlist']
        if persona in (Persona.COACH, Persona.ENERGETIC):
            return self.replies['affirmation']
        return self.replies['supportive']

# ===== ORCHESTRATOR =====

class ConversationOrchestrator:
    """Runs the per-turn state machine"""

    def __init__(self, oracle: TextOracle, classifier: Optional[CrisisClassifier] = None,
                 selector: Optional[PersonaSelector] = None,
                 offline_replies: Optional[OfflineReplyProvider] = None):
        self.oracle = oracle
        self.classifier = classifier or CrisisClassifier(oracle)
        self.selector = selector or PersonaSelector(oracle)
        self.offline_replies = offline_replies or OfflineReplyProvider()
        self.stats = OrchestratorStats()

    async def respond(self, message: str, history: List[ChatMessage],
                      default_persona: Persona, dynamic_enabled: bool) -> TurnResult:
        """Produce the reply to one user message.

        history holds the earlier conversation, oldest first, without message itself.
        """
        states = [TurnState.RECEIVED, TurnState.CLASSIFYING]
        self.stats.total_turns += 1

        tier = await self.classifier.classify(message)
        if tier == RiskTier.HIGH:
            logger.warning("Turn escalated to crisis response")
            return self._crisis_result(tier, states)

        states.append(TurnState.SELECTING_PERSONA)
        persona = await self.selector.select(message, default_persona, dynamic_enabled)

        states.append(TurnState.GENERATING)
        if not self.oracle.available:
            self.stats.offline_turns += 1
            raw_reply = self.offline_replies.get_reply(persona)
        else:
            try:
                response = await self.oracle.complete(OracleRequest(
                    system_prompt=get_persona_profile(persona).system_prompt,
                    new_message=message,
                    history=[(m.text, Sender(m.sender)) for m in history]
                ))
                raw_reply = response.text
            except Exception as e:
                logger.error(f"Reply generation failed: {e}")
                states.append(TurnState.DEGRADED_REPLY)
                self.stats.degraded_turns += 1
                self._count_persona(default_persona)
                return TurnResult(
                    text=DEGRADED_REPLY_TEXT,
                    persona_used=default_persona,
                    tier=tier,
                    states=states
                )

        parsed = parse_reply(raw_reply)
        if parsed.is_crisis:
            logger.warning("Generated reply carried the crisis sentinel")
            return self._crisis_result(RiskTier.HIGH, states)

        states.append(TurnState.DELIVERED)
        self._count_persona(persona)

        return TurnResult(
            text=parsed.text,
            persona_used=persona,
            tier=tier,
            quick_replies=parsed.quick_replies,
            playlist=parsed.playlist,
            affirmation=parsed.affirmation,
            states=states
        )

    def _crisis_result(self, tier: RiskTier, states: List[TurnState]) -> TurnResult:
        states.append(TurnState.CRISIS_RESPONSE)
        self.stats.crisis_turns += 1
        return TurnResult(
            text=CRISIS_SENTINEL,
            persona_used=CRISIS_PERSONA,
            tier=tier,
            states=states
        )

    def _count_persona(self, persona: Persona) -> None:
        used = self.stats.personas_used
        used[persona.value] = used.get(persona.value, 0) + 1

    def get_stats(self) -> Dict[str, Any]:
        return {
            'turns': self.stats.to_dict(),
            'classifier': self.classifier.get_stats(),
            'selector': self.selector.get_stats(),
            'oracle': self.oracle.get_stats()
        }

    def reset_stats(self) -> None:
        self.stats = OrchestratorStats()
        logger.info("Orchestrator stats reset")

__all__ = [
    'DEGRADED_REPLY_TEXT', 'CRISIS_PERSONA', 'TurnState', 'TERMINAL_STATES',
    'TurnResult', 'OrchestratorStats', 'OfflineReplyProvider', 'ConversationOrchestrator'
]
