#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Reply Directives
Bracket-tag grammar embedded in generated replies

Version: 1.0.0
Date: 2026-10-19
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any

CRISIS_SENTINEL = "[CRISIS_RESPONSE]"
AFFIRMATION_MARKER = "[AFFIRMATION]"
MAX_QUICK_REPLIES = 3

QUICK_REPLIES_PATTERN = re.compile(r"\[QUICK_REPLIES:(.*?)\]", re.DOTALL)
PLAYLIST_PATTERN = re.compile(r"\[PLAYLIST:([^|\]]+)\|([^\]]+)\]")

@dataclass(frozen=True)
class Playlist:
    title: str
    url: str

    def to_dict(self) -> Dict[str, str]:
        return {'title': self.title, 'url': self.url}

@dataclass
class ParsedReply:
    """Reply with directives extracted"""
    text: str
    quick_replies: List[str] = field(default_factory=list)
    playlist: Optional[Playlist] = None
    affirmation: bool = False
    is_crisis: bool = False

    @property
    def primary_content(self) -> str:
        """What a renderer shows first; a playlist outranks an affirmation"""
        if self.is_crisis:
            return "crisis"
        if self.playlist:
            return "playlist"
        if self.affirmation:
            return "affirmation"
        return "text"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'quick_replies': list(self.quick_replies),
            'playlist': self.playlist.to_dict() if self.playlist else None,
            'affirmation': self.affirmation,
            'is_crisis': self.is_crisis,
            'primary_content': self.primary_content
        }

def split_quick_replies(raw: str) -> List[str]:
    """'a| b ||c' -> ['a', 'b', 'c'], capped"""
    replies = [reply.strip() for reply in raw.split('|')]
    return [reply for reply in replies if reply][:MAX_QUICK_REPLIES]

def _tidy(text: str) -> str:
    # Collapse blank lines left behind by removed tags
    text = re.sub(r"[ \t]+\n", "\n", text)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()

def parse_reply(raw: Optional[str]) -> ParsedReply:
    """Extract quick replies, playlist and affirmation from a generated reply"""
    text = (raw or "").strip()

    # The sentinel anywhere in a reply turns the whole reply into a crisis response
    if CRISIS_SENTINEL in text:
        return ParsedReply(text=CRISIS_SENTINEL, is_crisis=True)

    quick_replies: List[str] = []
    match = QUICK_REPLIES_PATTERN.search(text)
    if match:
        quick_replies = split_quick_replies(match.group(1))
    text = QUICK_REPLIES_PATTERN.sub("", text)

    playlist = None
    match = PLAYLIST_PATTERN.search(text)
    if match:
        playlist = Playlist(title=match.group(1).strip(), url=match.group(2).strip())
    text = PLAYLIST_PATTERN.sub("", text)

    text = text.strip()
    affirmation = text.startswith(AFFIRMATION_MARKER)
    text = text.replace(AFFIRMATION_MARKER, "")

    return ParsedReply(
        text=_tidy(text),
        quick_replies=quick_replies,
        playlist=playlist,
        affirmation=affirmation
    )

__all__ = [
    'CRISIS_SENTINEL', 'AFFIRMATION_MARKER', 'MAX_QUICK_REPLIES',
    'Playlist', 'ParsedReply', 'split_quick_replies', 'parse_reply'
]
