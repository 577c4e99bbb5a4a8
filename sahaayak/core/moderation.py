#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Content Moderation
Fail-closed safety gate for community posts and comments

Version: 1.0.0
Date: 2026-10-19
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Any
import logging

from pydantic import BaseModel, StrictBool

from sahaayak.core.oracle import TextOracle, OracleRequest, OracleResponseError

logger = logging.getLogger(__name__)

MODERATION_PROMPT = """Analyze the next message, a text from a youth mental wellness community forum, for safety.
The community is a supportive space. The text MUST NOT contain:
- Harassment or bullying (e.g., insults, threats, targeting individuals).
- Hate speech (e.g., attacks based on race, religion, gender, etc.).
- Sexually explicit content.
- Encouragement or glorification of self-harm or suicide.

If the text is SAFE and appropriate, respond with: {"is_safe": true}.
If the text is UNSAFE, respond with: {"is_safe": false, "reason": "A brief, user-friendly explanation."}.

Example reasons for unsafe content:
- "This content appears to be bullying or harassment."
- "Content related to self-harm is not allowed in this supportive space."
- "Please keep the conversation respectful and avoid personal attacks."
- "Hate speech is not tolerated in this community." """

GUIDELINES_REASON = "This content violates community guidelines regarding harmful language."
UNVERIFIED_REASON = "Could not verify content safety."
MODERATION_ERROR_REASON = "Could not verify content safety right now. Please try again later."

class ModerationVerdict(BaseModel):
    """Structured moderation reply"""
    is_safe: StrictBool
    reason: Optional[str] = None

@dataclass
class ModerationResult:
    is_safe: bool
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {'is_safe': self.is_safe, 'reason': self.reason}

class ContentModerator:
    """Moderation gate; any doubt rejects"""

    def __init__(self, oracle: TextOracle):
        self.oracle = oracle
        self.blocked_terms: List[str] = ['kill', 'suicide', 'self-harm', 'hate', 'attack', 'idiot', 'stupid']
        self.checked = 0
        self.rejected = 0

    def keyword_verdict(self, text: str) -> ModerationResult:
        lowered = (text or "").lower()
        if any(term in lowered for term in self.blocked_terms):
            return ModerationResult(is_safe=False, reason=GUIDELINES_REASON)
        return ModerationResult(is_safe=True)

    async def moderate(self, text: str) -> ModerationResult:
        """Check community text before it is stored"""
        result = await self._moderate(text)
        self.checked += 1
        if not result.is_safe:
            self.rejected += 1
            logger.info(f"Content rejected: {result.reason}")
        return result

    async def _moderate(self, text: str) -> ModerationResult:
        if not self.oracle.available:
            return self.keyword_verdict(text)

        try:
            verdict = await self.oracle.complete_json(
                OracleRequest(system_prompt=MODERATION_PROMPT, new_message=text, temperature=0.1),
                ModerationVerdict
            )
        except OracleResponseError:
            return ModerationResult(is_safe=False, reason=UNVERIFIED_REASON)
        except Exception as e:
            logger.error(f"Error moderating content: {e}")
            return ModerationResult(is_safe=False, reason=MODERATION_ERROR_REASON)

        if verdict.is_safe:
            return ModerationResult(is_safe=True)
        return ModerationResult(is_safe=False, reason=verdict.reason or GUIDELINES_REASON)

    def get_stats(self) -> Dict[str, int]:
        return {'checked': self.checked, 'rejected': self.rejected}

__all__ = [
    'MODERATION_PROMPT', 'GUIDELINES_REASON', 'UNVERIFIED_REASON', 'MODERATION_ERROR_REASON',
    'ModerationVerdict', 'ModerationResult', 'ContentModerator'
]
