#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Sahaayak Core v1.0 - Text Completion Oracle
Async OpenAI-backed completion client with retries, statistics and structured replies

Version: 1.0.0
Date: 2026-10-19
"""

import re
import json
import time
import asyncio
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Dict, List, Optional, Any, Tuple, Type, TypeVar
from dataclasses import dataclass, field
from enum import Enum
import logging

import openai
from openai import AsyncOpenAI
from pydantic import BaseModel, ValidationError as SchemaValidationError

from sahaayak.core.models import Sender

logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# ===== EXCEPTIONS =====

class OracleError(Exception):
    """Base error for oracle calls"""
    pass

class OracleUnavailableError(OracleError):
    """Oracle is not configured"""
    pass

class OracleRateLimitError(OracleError):
    """Provider rate limit exhausted all retries"""
    pass

class OracleResponseError(OracleError):
    """Reply does not decode into the expected shape"""
    pass

# ===== ENUMS =====

class OracleProvider(Enum):
    OPENAI = "openai"
    SCRIPTED = "scripted"
    NONE = "none"

# ===== DATA CLASSES =====

@dataclass
class OracleRequest:
    """One completion request"""
    system_prompt: str
    new_message: str
    history: List[Tuple[str, Sender]] = field(default_factory=list)
    temperature: float = 0.7
    json_mode: bool = False

    def to_messages(self) -> List[Dict[str, str]]:
        """Chat-completions message list, oldest first"""
        messages = [{"role": "system", "content": self.system_prompt}]
        for text, sender in self.history:
            role = "user" if sender == Sender.USER else "assistant"
            messages.append({"role": role, "content": text})
        messages.append({"role": "user", "content": self.new_message})
        return messages

@dataclass
class OracleResponse:
    """Completion reply"""
    text: str
    provider: OracleProvider = OracleProvider.OPENAI
    tokens_used: int = 0
    response_time_ms: int = 0
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'text': self.text,
            'provider': self.provider.value,
            'tokens_used': self.tokens_used,
            'response_time_ms': self.response_time_ms,
            'timestamp': self.timestamp
        }

@dataclass
class OracleStats:
    """Oracle request statistics"""
    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    malformed_responses: int = 0
    total_tokens_used: int = 0
    average_response_time_ms: float = 0.0

    @property
    def success_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return (self.successful_requests / self.total_requests) * 100

    def record_success(self, response: OracleResponse) -> None:
        self.total_requests += 1
        self.successful_requests += 1
        self.total_tokens_used += response.tokens_used
        # Running mean over successful calls
        n = self.successful_requests
        self.average_response_time_ms += (response.response_time_ms - self.average_response_time_ms) / n

    def record_failure(self) -> None:
        self.total_requests += 1
        self.failed_requests += 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            'total_requests': self.total_requests,
            'successful_requests': self.successful_requests,
            'failed_requests': self.failed_requests,
            'malformed_responses': self.malformed_responses,
            'total_tokens_used': self.total_tokens_used,
            'average_response_time_ms': round(self.average_response_time_ms, 2),
            'success_rate': round(self.success_rate, 2)
        }

# ===== STRUCTURED REPLIES =====

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)

def extract_json_text(text: str) -> str:
    """Strip a markdown code fence around a JSON reply"""
    text = (text or "").strip()
    match = _CODE_FENCE.match(text)
    return match.group(1) if match else text

def schema_instructions(schema: Type[BaseModel]) -> str:
    return (
        "Respond ONLY with a JSON object matching this JSON schema, without any other text:\n"
        + json.dumps(schema.model_json_schema(), ensure_ascii=False)
    )

# ===== ORACLE INTERFACE =====

class TextOracle(ABC):
    """Text-completion oracle contract"""

    provider = OracleProvider.NONE

    def __init__(self):
        self.stats = OracleStats()

    @property
    @abstractmethod
    def available(self) -> bool:
        """False means callers should go straight to their local fallback"""

    @abstractmethod
    async def complete(self, request: OracleRequest) -> OracleResponse:
        """Plain-text completion"""

    async def complete_json(self, request: OracleRequest, schema: Type[SchemaT]) -> SchemaT:
        """Completion decoded and validated against a pydantic schema"""
        structured = OracleRequest(
            system_prompt=f"{request.system_prompt}\n\n{schema_instructions(schema)}",
            new_message=request.new_message,
            history=list(request.history),
            temperature=request.temperature,
            json_mode=True
        )
        response = await self.complete(structured)
        try:
            return schema.model_validate_json(extract_json_text(response.text))
        except SchemaValidationError as e:
            self.stats.malformed_responses += 1
            logger.warning(f"Malformed {schema.__name__} reply: {e.error_count()} validation error(s)")
            raise OracleResponseError(f"Reply does not match {schema.__name__}") from e

    def get_stats(self) -> Dict[str, Any]:
        return {
            'provider': self.provider.value,
            'available': self.available,
            'service': self.stats.to_dict()
        }

    def get_health_status(self) -> Dict[str, Any]:
        """Health summary"""
        status = "healthy"
        issues = []

        if not self.available:
            status = "warning"
            issues.append("Oracle not configured")
        elif self.stats.total_requests and self.stats.success_rate < 80:
            status = "warning"
            issues.append("Low success rate")

        return {
            'status': status,
            'issues': issues,
            'stats': self.get_stats(),
            'last_check': datetime.now().isoformat()
        }

class UnavailableOracle(TextOracle):
    """Stand-in used when no provider is configured"""

    @property
    def available(self) -> bool:
        return False

    async def complete(self, request: OracleRequest) -> OracleResponse:
        raise OracleUnavailableError("Text-completion oracle is not configured")

# ===== OPENAI ORACLE =====

class OpenAIOracle(TextOracle):
    """Oracle on the OpenAI async client"""

    provider = OracleProvider.OPENAI

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", max_tokens: int = 800,
                 request_timeout: int = 30, max_retries: int = 3, retry_delay: float = 1.0,
                 client: Optional[AsyncOpenAI] = None):
        super().__init__()
        self.model = model
        self.max_tokens = max_tokens
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.client = client or AsyncOpenAI(api_key=api_key, timeout=request_timeout)

        logger.info(f"OpenAI oracle initialized - model {model}")

    @property
    def available(self) -> bool:
        return True

    async def complete(self, request: OracleRequest) -> OracleResponse:
        start_time = time.time()
        try:
            response = await self._create_with_retries(request)
        except OracleError:
            self.stats.record_failure()
            raise

        response.response_time_ms = int((time.time() - start_time) * 1000)
        self.stats.record_success(response)
        return response

    async def _create_with_retries(self, request: OracleRequest) -> OracleResponse:
        kwargs: Dict[str, Any] = {
            'model': self.model,
            'messages': request.to_messages(),
            'max_tokens': self.max_tokens,
            'temperature': request.temperature,
            'timeout': self.request_timeout
        }
        if request.json_mode:
            kwargs['response_format'] = {"type": "json_object"}

        for attempt in range(self.max_retries):
            try:
                completion = await self.client.chat.completions.create(**kwargs)

                content = (completion.choices[0].message.content or "").strip()
                tokens_used = completion.usage.total_tokens if completion.usage else 0

                return OracleResponse(
                    text=content,
                    provider=OracleProvider.OPENAI,
                    tokens_used=tokens_used
                )

            except openai.RateLimitError:
                logger.warning(f"OpenAI rate limit hit, attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay * (2 ** attempt))
                else:
                    raise OracleRateLimitError("OpenAI rate limit exceeded")

            except openai.APITimeoutError:
                logger.warning(f"OpenAI timeout, attempt {attempt + 1}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)
                else:
                    raise OracleError("OpenAI request timeout")

            except Exception as e:
                logger.error(f"OpenAI API error on attempt {attempt + 1}: {e}")
                if attempt < self.max_retries - 1:
                    await asyncio.sleep(self.retry_delay)
                else:
                    raise OracleError(f"OpenAI API failed: {e}") from e

        raise OracleError("OpenAI request was not attempted")

# ===== CONVENIENCE FUNCTIONS =====

def create_oracle(ai_config=None) -> TextOracle:
    """Build the oracle from configuration"""
    if ai_config is None:
        from sahaayak.config import config
        ai_config = config.ai

    if not ai_config.is_configured:
        logger.warning("OpenAI API key not configured - using local fallbacks")
        return UnavailableOracle()

    return OpenAIOracle(
        api_key=ai_config.openai_api_key,
        model=ai_config.openai_model,
        max_tokens=ai_config.openai_max_tokens,
        request_timeout=ai_config.request_timeout,
        max_retries=ai_config.max_retries,
        retry_delay=ai_config.retry_delay
    )

__all__ = [
    'OracleError', 'OracleUnavailableError', 'OracleRateLimitError', 'OracleResponseError',
    'OracleProvider', 'OracleRequest', 'OracleResponse', 'OracleStats',
    'TextOracle', 'UnavailableOracle', 'OpenAIOracle',
    'extract_json_text', 'schema_instructions', 'create_oracle'
]
