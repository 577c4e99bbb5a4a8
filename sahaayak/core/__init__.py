"""
Core engine: oracle, safety gates, conversation turns, gamification and storage
"""

from sahaayak.core.models import (
    RiskTier, Persona, Sender, StreakType, IntentionFrequency, MoodSource,
    ValidationError, ChatMessage, User
)
from sahaayak.core.oracle import (
    TextOracle, OpenAIOracle, UnavailableOracle, OracleRequest, OracleResponse,
    OracleError, create_oracle
)
from sahaayak.core.crisis import CrisisClassifier
from sahaayak.core.moderation import ContentModerator
from sahaayak.core.personas import PersonaSelector
from sahaayak.core.orchestrator import ConversationOrchestrator, TurnResult, TurnState
from sahaayak.core.database import KeyedRecordStore, MemoryRecordStore, JsonFileRecordStore, create_record_store
from sahaayak.core.achievements import StreakEngine
from sahaayak.core.journeys import JourneyEngine
from sahaayak.core.intentions import IntentionTracker
from sahaayak.core.session import AppSession, TurnInProgressError

__all__ = [
    'RiskTier', 'Persona', 'Sender', 'StreakType', 'IntentionFrequency', 'MoodSource',
    'ValidationError', 'ChatMessage', 'User',
    'TextOracle', 'OpenAIOracle', 'UnavailableOracle', 'OracleRequest', 'OracleResponse',
    'OracleError', 'create_oracle',
    'CrisisClassifier', 'ContentModerator', 'PersonaSelector',
    'ConversationOrchestrator', 'TurnResult', 'TurnState',
    'KeyedRecordStore', 'MemoryRecordStore', 'JsonFileRecordStore', 'create_record_store',
    'StreakEngine', 'JourneyEngine', 'IntentionTracker',
    'AppSession', 'TurnInProgressError'
]
