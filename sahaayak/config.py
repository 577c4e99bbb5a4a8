#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Configuration
Centralised, environment-driven configuration with validation

Version: 1.0.0
Date: 2026-10-19
"""

import os
import sys
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz

class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"

class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

@dataclass
class DatabaseConfig:
    """Keyed record store configuration"""
    path: Path
    backup_dir: Path
    backup_interval_hours: int = 6
    max_backups: int = 10
    auto_backup: bool = True

@dataclass
class AIConfig:
    """Text-completion oracle configuration"""
    openai_api_key: Optional[str]
    openai_model: str = "gpt-4o-mini"
    openai_max_tokens: int = 800
    ai_enabled: bool = True
    request_timeout: int = 30
    max_retries: int = 3
    retry_delay: float = 1.0

    @property
    def is_configured(self) -> bool:
        return bool(self.ai_enabled and self.openai_api_key)

@dataclass
class ServerConfig:
    """HTTP API configuration"""
    host: str = "0.0.0.0"
    port: int = 8080
    debug_mode: bool = False

@dataclass
class BehaviourConfig:
    """Companion behaviour defaults"""
    timezone: str = "UTC"
    default_persona: str = "empathetic"
    dynamic_persona_default: bool = True
    draft_screen_min_length: int = 15

def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() in ('true', '1', 'yes')

class AppConfig:
    """Main configuration class"""

    def __init__(self):
        self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Load configuration from environment variables"""

        # Directories
        self.data_dir = Path(os.getenv('DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('BACKUP_DIR', str(self.data_dir / 'backups')))
        self.log_dir = Path(os.getenv('LOG_DIR', 'logs'))

        # Store
        self.database = DatabaseConfig(
            path=self.data_dir / "sahaayak_store.json",
            backup_dir=self.backup_dir,
            backup_interval_hours=int(os.getenv('BACKUP_INTERVAL_HOURS', 6)),
            max_backups=int(os.getenv('MAX_BACKUPS', 10)),
            auto_backup=_env_flag('AUTO_BACKUP', 'true')
        )

        # Oracle
        self.ai = AIConfig(
            openai_api_key=os.getenv('OPENAI_API_KEY') or None,
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_max_tokens=int(os.getenv('OPENAI_MAX_TOKENS', 800)),
            ai_enabled=_env_flag('AI_ENABLED', 'true'),
            request_timeout=int(os.getenv('AI_TIMEOUT', 30)),
            max_retries=int(os.getenv('AI_MAX_RETRIES', 3))
        )

        # Server
        self.server = ServerConfig(
            host=os.getenv('HOST', '0.0.0.0'),
            port=int(os.getenv('PORT', 8080)),
            debug_mode=_env_flag('DEBUG_MODE', 'false')
        )

        # Behaviour
        self.behaviour = BehaviourConfig(
            timezone=os.getenv('APP_TIMEZONE', 'UTC'),
            default_persona=os.getenv('DEFAULT_PERSONA', 'empathetic'),
            dynamic_persona_default=_env_flag('DYNAMIC_PERSONA_DEFAULT', 'true')
        )

        # Logging
        self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        self.log_to_file = _env_flag('LOG_TO_FILE', 'false')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

        # Features
        self.features = {
            'ai_enabled': self.ai.is_configured,
            'community': _env_flag('COMMUNITY_ENABLED', 'true'),
            'journeys': _env_flag('JOURNEYS_ENABLED', 'true')
        }

    def _validate_config(self):
        """Validate configuration values"""
        errors = []

        if not 1 <= self.server.port <= 65535:
            errors.append(f"PORT {self.server.port} is out of range (1-65535)")

        if self.behaviour.timezone not in pytz.all_timezones_set:
            errors.append(f"APP_TIMEZONE '{self.behaviour.timezone}' is not a known timezone")

        if self.behaviour.default_persona not in ('empathetic', 'coach', 'calm', 'mindful', 'energetic'):
            errors.append(f"DEFAULT_PERSONA '{self.behaviour.default_persona}' is not a known persona")

        if self.ai.max_retries < 1:
            errors.append("AI_MAX_RETRIES must be at least 1")

        if self.ai.ai_enabled and not self.ai.openai_api_key:
            logging.getLogger(__name__).info("OPENAI_API_KEY not set - oracle calls will use local fallbacks")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    def ensure_directories(self):
        """Create the directories the app writes to"""
        directories = [self.data_dir, self.backup_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self) -> Dict[str, Any]:
        """Build a logging.config.dictConfig mapping"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stdout
                }
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'httpx': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'openai': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                }
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"sahaayak_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def is_development(self) -> bool:
        return self.environment == Environment.DEVELOPMENT

    def get_feature_status(self) -> Dict[str, bool]:
        """Feature flag snapshot"""
        return self.features.copy()

    def to_dict(self) -> Dict[str, Any]:
        """Serialise configuration with secrets masked"""
        key = self.ai.openai_api_key
        return {
            'environment': self.environment.value,
            'ai': {
                'configured': self.ai.is_configured,
                'api_key': f"{key[:6]}..." if key else None,
                'model': self.ai.openai_model,
                'timeout': self.ai.request_timeout
            },
            'server': {
                'host': self.server.host,
                'port': self.server.port,
                'debug_mode': self.server.debug_mode
            },
            'behaviour': {
                'timezone': self.behaviour.timezone,
                'default_persona': self.behaviour.default_persona,
                'dynamic_persona_default': self.behaviour.dynamic_persona_default
            },
            'features': self.features,
            'database_path': str(self.database.path),
            'log_level': self.log_level.value
        }

# Global configuration instance
config = AppConfig()

__all__ = [
    'config',
    'AppConfig',
    'Environment',
    'LogLevel',
    'DatabaseConfig',
    'AIConfig',
    'ServerConfig',
    'BehaviourConfig'
]
