#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Wellness Insights
Oracle-backed analyses of mood and journal history with local fallbacks

Version: 1.0.0
Date: 2026-10-19
"""

import json
from dataclasses import dataclass
from typing import Dict, List, Literal, Optional, Any
import logging

from pydantic import BaseModel, Field

from sahaayak.core.models import JournalEntry, MoodLog, RiskTier
from sahaayak.core.catalog import WellnessJourney
from sahaayak.core.oracle import TextOracle, OracleRequest

logger = logging.getLogger(__name__)

# ===== PROMPTS =====

ANALYSIS_PROMPT = """Analyze the user data from a mental wellness app for an Indian youth user, given in the next message.
Provide a gentle, non-clinical, and supportive insight based on their recent mood logs and journal entries.
Also, assess the crisis level based on the content.
- 'none': No immediate concern.
- 'low': Shows signs of distress, could use support.
- 'high': Shows signs of severe distress, self-harm, or hopelessness. Requires immediate suggestion to seek help."""

SUGGESTION_PROMPT = """You are Sahaayak, a gentle and proactive wellness companion for Indian youth. Your goal is to provide ONE timely, supportive, and actionable suggestion based on the user's recent activity, given in the next message.
Be empathetic, concise, and encouraging. Never be clinical or alarming.

Based on the data, identify a pattern and generate a suggestion.
- If moods are consistently low (1 or 2), suggest a calming exercise.
- If a journal mentions stress/anxiety, suggest a relevant tool or journey.
- If they are on a journey, offer encouragement related to that journey's theme.
- If data is sparse or positive, offer a general wellness tip or encouragement.

The suggestion is a short, empathetic, and encouraging sentence (max 25 words). action_text is an optional short call-to-action for a button (e.g., 'Try this exercise', 'Start this journey'). action_link is the optional in-app link for the action (e.g., '/exercises', '/journeys/exam_stress_journey')."""

JOURNAL_PROMPT_PROMPT = (
    "Generate a single, gentle, and reflective journal prompt for a young person using a mental wellness app. "
    "The prompt should encourage self-reflection on feelings, experiences, or gratitude. Keep it under 25 words. "
    "Do not ask about trauma or deeply negative experiences. Make it inspiring and simple. "
    "Reply with the prompt only."
)

GOAL_PROMPT = (
    "A user in a wellness app shares a high-level goal in the next message. Break this down into 3-4 small, "
    "concrete, and actionable habits they can track daily or weekly. The habits should be simple and encouraging."
)

# ===== FALLBACKS =====

HOPELESSNESS_PHRASES = ['hopeless', "can't go on", 'ending it']
DIFFICULT_TIME_INSIGHT = "It sounds like you are going through a very difficult time. It's brave of you to share this."
CONSISTENT_JOURNALING_INSIGHT = (
    "You've been journaling consistently. Keep it up! It's a great way to process your thoughts and feelings."
)
DEFAULT_JOURNAL_PROMPT = "What is one small thing that brought you a moment of peace today?"
EMPTY_JOURNAL_PROMPT = "What's one small win you had today?"
ERROR_JOURNAL_PROMPT = "How are you truly feeling in this moment?"
DEFAULT_GOAL_HABITS = [
    "Meditate for 5 minutes daily",
    "Write down one thing you're grateful for each night",
    "Go for a 15-minute walk without your phone",
    "Drink a full glass of water first thing in the morning"
]

# ===== REPLY SCHEMAS =====

class AnalysisReply(BaseModel):
    insight: str
    crisis_level: Literal['none', 'low', 'high']

class SuggestionReply(BaseModel):
    suggestion: str
    action_text: Optional[str] = None
    action_link: Optional[str] = None

class GoalSuggestionsReply(BaseModel):
    suggestions: List[str] = Field(default_factory=list)

# ===== RESULTS =====

@dataclass
class Analysis:
    insight: str
    crisis_level: RiskTier

    def to_dict(self) -> Dict[str, Any]:
        return {'insight': self.insight, 'crisis_level': self.crisis_level.value}

@dataclass
class Suggestion:
    suggestion: str
    action_text: Optional[str] = None
    action_link: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'suggestion': self.suggestion,
            'action_text': self.action_text,
            'action_link': self.action_link
        }

FALLBACK_SUGGESTION = Suggestion(
    suggestion="Remember to take a moment for yourself today. A little self-care can make a big difference!",
    action_text="Try a breathing exercise",
    action_link="/exercises"
)

def _newest_first(entries: List[JournalEntry]) -> List[JournalEntry]:
    return sorted(entries, key=lambda e: e.date, reverse=True)

# ===== SERVICE =====

class WellnessInsights:
    """Structured analyses; every method returns its safe default instead of raising"""

    def __init__(self, oracle: TextOracle):
        self.oracle = oracle

    async def analyze(self, journal_entries: List[JournalEntry], mood_logs: List[MoodLog]) -> Optional[Analysis]:
        """Supportive insight with a crisis level"""
        entries = _newest_first(journal_entries)

        if not self.oracle.available:
            latest = entries[0].content.lower().replace("’", "'") if entries else ""
            if any(phrase in latest for phrase in HOPELESSNESS_PHRASES):
                return Analysis(insight=DIFFICULT_TIME_INSIGHT, crisis_level=RiskTier.HIGH)
            return Analysis(insight=CONSISTENT_JOURNALING_INSIGHT, crisis_level=RiskTier.NONE)

        payload = {
            'mood_logs_last_14': [
                {'date': log.date, 'mood': log.mood, 'note': log.note}
                for log in sorted(mood_logs, key=lambda l: l.date, reverse=True)[:14]
            ],
            'journal_entries_last_5': [
                {'date': e.date, 'mood': e.mood, 'content': e.content} for e in entries[:5]
            ]
        }
        try:
            reply = await self.oracle.complete_json(
                OracleRequest(system_prompt=ANALYSIS_PROMPT, new_message=json.dumps(payload, ensure_ascii=False)),
                AnalysisReply
            )
        except Exception as e:
            logger.error(f"Error getting wellness analysis: {e}")
            return None

        return Analysis(insight=reply.insight, crisis_level=RiskTier(reply.crisis_level))

    async def proactive_suggestion(self, mood_logs: List[MoodLog], journal_entries: List[JournalEntry],
                                   active_journey: Optional[WellnessJourney] = None,
                                   current_day: Optional[int] = None) -> Optional[Suggestion]:
        """One timely, actionable nudge"""
        if not self.oracle.available:
            return FALLBACK_SUGGESTION

        payload = {
            'last_7_moods': [
                {'mood': log.mood_score, 'date': log.date}
                for log in sorted(mood_logs, key=lambda l: l.date, reverse=True)[:7]
            ],
            'last_3_journal_themes': [e.content for e in _newest_first(journal_entries)[:3]],
            'active_journey': (
                {'title_key': active_journey.title_key, 'current_day': current_day} if active_journey else None
            )
        }
        try:
            reply = await self.oracle.complete_json(
                OracleRequest(system_prompt=SUGGESTION_PROMPT, new_message=json.dumps(payload, ensure_ascii=False)),
                SuggestionReply
            )
        except Exception as e:
            logger.error(f"Error getting proactive suggestion: {e}")
            return None

        return Suggestion(suggestion=reply.suggestion, action_text=reply.action_text, action_link=reply.action_link)

    async def daily_journal_prompt(self) -> str:
        if not self.oracle.available:
            return DEFAULT_JOURNAL_PROMPT

        try:
            response = await self.oracle.complete(OracleRequest(
                system_prompt=JOURNAL_PROMPT_PROMPT,
                new_message="Today's journal prompt, please."
            ))
        except Exception as e:
            logger.error(f"Error generating journal prompt: {e}")
            return ERROR_JOURNAL_PROMPT

        text = response.text.strip().strip('"').strip()
        return text or EMPTY_JOURNAL_PROMPT

    async def goal_suggestions(self, goal: str) -> List[str]:
        """Break a goal into small trackable habits"""
        if not self.oracle.available:
            return list(DEFAULT_GOAL_HABITS)

        try:
            reply = await self.oracle.complete_json(
                OracleRequest(system_prompt=GOAL_PROMPT, new_message=goal),
                GoalSuggestionsReply
            )
        except Exception as e:
            logger.error(f"Error getting goal suggestions: {e}")
            return []

        return [s.strip() for s in reply.suggestions if s.strip()]

__all__ = [
    'Analysis', 'Suggestion', 'AnalysisReply', 'SuggestionReply', 'GoalSuggestionsReply',
    'FALLBACK_SUGGESTION', 'DEFAULT_JOURNAL_PROMPT', 'EMPTY_JOURNAL_PROMPT', 'ERROR_JOURNAL_PROMPT',
    'DEFAULT_GOAL_HABITS', 'DIFFICULT_TIME_INSIGHT', 'CONSISTENT_JOURNALING_INSIGHT',
    'WellnessInsights'
]
