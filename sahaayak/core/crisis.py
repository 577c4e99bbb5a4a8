#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Crisis Classifier
Assigns a risk tier to one utterance and screens unsent drafts

Version: 1.0.0
Date: 2026-10-19
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any
import logging

from sahaayak.core.models import RiskTier
from sahaayak.core.oracle import TextOracle, OracleRequest

logger = logging.getLogger(__name__)

CRISIS_DETECTION_PROMPT = """You are a highly sensitive and empathetic crisis detection model for a youth mental wellness app.
Your sole task is to analyze the user's message for signs of distress and classify it into one of three levels.
Be cautious and prioritize user safety.

Definitions and examples:
- 'high': Urgent crisis. The user expresses direct or strong indirect suicidal thoughts, plans for self-harm, or overwhelming hopelessness.
  Examples: "I want to end my life", "I can't do this anymore, I'm going to hurt myself", "Life isn't worth living", "Everything is black, there's no way out".

- 'low': Non-urgent but significant distress. The user expresses feelings of sadness, anxiety, stress, loneliness, or moderate hopelessness, but without immediate intent for self-harm.
  Examples: "I feel so lonely all the time", "I'm failing all my exams and I feel worthless", "I can't stop worrying", "I've been crying for days".

- 'none': No detectable distress. General conversation, questions, or positive emotions.
  Examples: "Hi, how are you?", "Thanks for the tip!", "What is mindfulness?", "I had a great day today."

The next message is the user's message. Analyze it carefully and respond with ONLY ONE WORD: 'high', 'low', or 'none'."""

@dataclass
class DraftScreening:
    """Result of screening an unsent draft"""
    tier: RiskTier
    screened: bool

    @property
    def show_distress_banner(self) -> bool:
        return self.tier == RiskTier.HIGH

    def to_dict(self) -> Dict[str, Any]:
        return {
            'tier': self.tier.value,
            'screened': self.screened,
            'show_distress_banner': self.show_distress_banner
        }

@dataclass
class ClassifierStats:
    classifications: int = 0
    oracle_failures: int = 0
    keyword_escalations: int = 0
    by_tier: Dict[str, int] = field(default_factory=lambda: {tier.value: 0 for tier in RiskTier})

    def to_dict(self) -> Dict[str, Any]:
        return {
            'classifications': self.classifications,
            'oracle_failures': self.oracle_failures,
            'keyword_escalations': self.keyword_escalations,
            'by_tier': dict(self.by_tier)
        }

def _normalise(text: str) -> str:
    return (text or "").lower().replace("’", "'")

class CrisisClassifier:
    """Crisis tier for a single utterance; never raises"""

    def __init__(self, oracle: TextOracle, draft_min_length: int = 15):
        self.oracle = oracle
        self.draft_min_length = draft_min_length
        self.patterns = self._load_patterns()
        self.stats = ClassifierStats()

    def _load_patterns(self) -> Dict[RiskTier, List[str]]:
        """Keyword lists, checked high first"""
        return {
            RiskTier.HIGH: [
                'kill myself', 'end my life', 'self-harm', 'hopeless', "can't go on",
                'ending it', 'want to die', 'suicide', 'hurt myself', 'no reason to live'
            ],
            RiskTier.LOW: [
                'lonely', 'worthless', 'anxious', 'depressed', 'crying', 'overwhelmed',
                'stressed out', "can't sleep", 'feeling down', 'panic attack'
            ]
        }

    def add_pattern(self, tier: RiskTier, keywords: List[str]) -> None:
        """Extend the keyword list of a tier"""
        if tier == RiskTier.NONE:
            raise ValueError("Keywords cannot map to the none tier")
        self.patterns.setdefault(tier, []).extend(k.lower() for k in keywords)

    def keyword_tier(self, text: str) -> RiskTier:
        """Local keyword fallback: first matching list wins"""
        lowered = _normalise(text)
        for tier in (RiskTier.HIGH, RiskTier.LOW):
            if any(keyword in lowered for keyword in self.patterns.get(tier, [])):
                return tier
        return RiskTier.NONE

    async def classify(self, text: str) -> RiskTier:
        """Oracle tier escalated by the keyword tier"""
        local_tier = self.keyword_tier(text)
        tier = local_tier

        if self.oracle.available:
            try:
                response = await self.oracle.complete(OracleRequest(
                    system_prompt=CRISIS_DETECTION_PROMPT,
                    new_message=text,
                    temperature=0.1
                ))
                oracle_tier = RiskTier.parse(response.text)
                tier = max(oracle_tier, local_tier)
                if local_tier > oracle_tier:
                    self.stats.keyword_escalations += 1
                    logger.info(f"Keyword check escalated crisis tier {oracle_tier.value} -> {local_tier.value}")
            except Exception as e:
                self.stats.oracle_failures += 1
                logger.error(f"Crisis classification failed, using keyword tier {local_tier.value}: {e}")
        else:
            logger.debug("Oracle unavailable - keyword crisis classification")

        self.stats.classifications += 1
        self.stats.by_tier[tier.value] += 1
        if tier == RiskTier.HIGH:
            logger.warning("High crisis tier detected")
        return tier

    async def screen_draft(self, text: str) -> DraftScreening:
        """Classify an unsent draft once it is long enough to mean something"""
        if len((text or "").strip()) < self.draft_min_length:
            return DraftScreening(tier=RiskTier.NONE, screened=False)
        return DraftScreening(tier=await self.classify(text), screened=True)

    def get_stats(self) -> Dict[str, Any]:
        return self.stats.to_dict()

__all__ = ['CRISIS_DETECTION_PROMPT', 'DraftScreening', 'ClassifierStats', 'CrisisClassifier']
