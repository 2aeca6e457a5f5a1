#!/usr/bin/env python3
"""
OpenAI integration for coverage reports and entity extraction.

Wraps the async chat completions API behind the same retry executor the
HTTP layer uses. The SDK's own retries are disabled so one policy governs
every outbound call.
"""

import logging
from typing import List, Dict, Optional

import openai
from openai import AsyncOpenAI

from core.exceptions import LLMError, NetworkError, NETWORK_CONNECTION_FAILED, NETWORK_TIMEOUT
from core.retry import RetryPolicy, is_retryable_http_error, with_retry

logger = logging.getLogger(__name__)

PROVIDER = 'openai'


class OpenAIClient:
    """Client for OpenAI chat completions."""

    def __init__(self,
                 api_key: str,
                 model: str = "gpt-4o-mini",
                 temperature: float = 0.3,
                 retry_policy: Optional[RetryPolicy] = None,
                 client: Optional[AsyncOpenAI] = None):
        """
        Initialize OpenAI client.

        Args:
            api_key: OpenAI API key
            model: Chat model name
            temperature: Sampling temperature (low for consistent analysis)
            retry_policy: Base retry configuration; the HTTP predicate is always applied
            client: Preconfigured AsyncOpenAI instance (tests)
        """
        if not api_key and client is None:
            raise ValueError("OpenAI API key not provided")

        self.client = client or AsyncOpenAI(api_key=api_key, max_retries=0)
        self.model = model
        self.temperature = temperature
        base_policy = retry_policy or RetryPolicy()
        self.retry_policy = RetryPolicy(
            max_retries=base_policy.max_retries,
            initial_delay_ms=base_policy.initial_delay_ms,
            backoff_multiplier=base_policy.backoff_multiplier,
            max_delay_ms=base_policy.max_delay_ms,
            retry_immediately_once=base_policy.retry_immediately_once,
            should_retry=is_retryable_http_error,
        )

    async def _complete_once(self, messages: List[Dict[str, str]]) -> str:
        try:
            response = await self.client.chat.completions.create(
                model=self.model,
                messages=messages,
                temperature=self.temperature,
            )
        except openai.APITimeoutError as e:
            raise NetworkError(NETWORK_TIMEOUT, 'openai:chat.completions', e) from e
        except openai.APIConnectionError as e:
            raise NetworkError(NETWORK_CONNECTION_FAILED, 'openai:chat.completions', e) from e
        except openai.APIStatusError as e:
            raise LLMError(PROVIDER, self.model, str(e), status_code=e.status_code) from e

        content = ''
        if response.choices:
            content = response.choices[0].message.content or ''
        if not content:
            raise LLMError(PROVIDER, self.model, "OpenAI API returned empty content")

        usage = getattr(response, 'usage', None)
        if usage is not None:
            logger.info(f"OpenAI call successful - tokens: {usage.prompt_tokens} prompt + "
                        f"{usage.completion_tokens} completion = {usage.total_tokens} total")
        return content

    async def generate_chat_completion(self, messages: List[Dict[str, str]]) -> str:
        """
        Generate one completion for role-tagged messages.

        Args:
            messages: Chat messages ({'role': ..., 'content': ...})

        Returns:
            Completion text

        Raises:
            LLMError: Error status or empty completion after all retries
            NetworkError: Connection failure after all retries
        """
        logger.info(f"Requesting OpenAI completion ({self.model}, {len(messages)} messages)")
        return await with_retry(
            lambda: self._complete_once(messages),
            self.retry_policy,
            'OpenAI Chat Completion'
        )
