#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Persona Selection
Chooses the persona that answers one reply

Version: 1.0.0
Date: 2026-10-19
"""

from typing import Dict, List, Tuple
import logging

from sahaayak.core.models import Persona
from sahaayak.core.oracle import TextOracle, OracleRequest

logger = logging.getLogger(__name__)

PERSONA_SELECTION_PROMPT = """Analyze the next message, the user's message from a mental wellness chat. Which of these personas is most appropriate for a response:
- 'empathetic': For expressing sadness, loss, or deep feelings.
- 'coach': For seeking motivation, goals, or solutions.
- 'calm': For anxiety, stress, panic, or feeling overwhelmed.
- 'energetic': For excitement, sharing good news, or needing a hype-up.
- 'mindful': For wanting to ground, reflect, or be present.
- 'default': For neutral, general chat, greetings, or questions.

Respond with ONLY ONE of these words: empathetic, coach, calm, energetic, mindful, default."""

class PersonaSelector:
    """Effective persona policy"""

    def __init__(self, oracle: TextOracle):
        self.oracle = oracle
        # Ordered; first matching rule wins
        self.keyword_rules: List[Tuple[Tuple[str, ...], Persona]] = [
            (('anxious', 'stressed'), Persona.CALM),
            (('sad', 'depressed'), Persona.EMPATHETIC),
            (('motivate', 'procrastinating'), Persona.COACH),
        ]
        self.selections: Dict[str, int] = {persona.value: 0 for persona in Persona}

    def keyword_persona(self, text: str, default_persona: Persona) -> Persona:
        lowered = (text or "").lower()
        for keywords, persona in self.keyword_rules:
            if any(keyword in lowered for keyword in keywords):
                return persona
        return default_persona

    async def select(self, text: str, default_persona: Persona, dynamic_enabled: bool) -> Persona:
        """Pick a persona; any oracle doubt falls back to the default"""
        persona = await self._select(text, default_persona, dynamic_enabled)
        self.selections[persona.value] += 1
        return persona

    async def _select(self, text: str, default_persona: Persona, dynamic_enabled: bool) -> Persona:
        if not dynamic_enabled:
            return default_persona

        if not self.oracle.available:
            return self.keyword_persona(text, default_persona)

        try:
            response = await self.oracle.complete(OracleRequest(
                system_prompt=PERSONA_SELECTION_PROMPT,
                new_message=text,
                temperature=0.1
            ))
        except Exception as e:
            logger.error(f"Error determining effective persona: {e}")
            return default_persona

        persona = Persona.parse(response.text)
        if persona is None:
            logger.debug(f"Persona answer {response.text[:20]!r} not in the closed set - using default")
            return default_persona
        return persona

    def get_stats(self) -> Dict[str, int]:
        return dict(self.selections)

__all__ = ['PERSONA_SELECTION_PROMPT', 'PersonaSelector']
