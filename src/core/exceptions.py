#!/usr/bin/env python3
"""
Standardized exception hierarchy for the topic coverage service.

Failures are classified where they happen: HTTP failures carry their status
code, network failures carry a reason code. Retry and caching decisions come
from these types; message markers are only consulted for errors no layer
classified.
"""

from typing import Optional, Dict, Any, List


class NewsAggregatorError(Exception):
    """Base exception for all topic coverage errors."""

    def __init__(self, message: str, error_code: Optional[str] = None, context: Optional[Dict[str, Any]] = None):
        """
        Initialize base exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            context: Additional error context
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/serialization."""
        return {
            'error_type': self.__class__.__name__,
            'error_code': self.error_code,
            'message': self.message,
            'context': self.context
        }


# Source-related exceptions
class SourceError(NewsAggregatorError):
    """Base exception for upstream article source errors."""

    @property
    def is_transient(self) -> bool:
        return False


class HttpStatusError(SourceError):
    """Upstream answered with a non-2xx status code."""

    def __init__(self, status_code: int, url: str, body: str = ""):
        message = f"HTTP {status_code} error: {body[:500]}"
        context = {
            'status_code': status_code,
            'url': url,
        }
        super().__init__(message, context=context)
        self.status_code = status_code
        self.url = url
        self.body = body

    @property
    def is_transient(self) -> bool:
        return self.status_code >= 500 or self.status_code == 429


# Reason codes for network failures
NETWORK_TIMEOUT = 'timeout'
NETWORK_CONNECTION_RESET = 'connection_reset'
NETWORK_SERVER_DISCONNECTED = 'server_disconnected'
NETWORK_DNS_FAILURE = 'dns_failure'
NETWORK_CONNECTION_FAILED = 'connection_failed'
NETWORK_PAYLOAD_ERROR = 'payload_error'
NETWORK_CLIENT_ERROR = 'client_error'

TRANSIENT_NETWORK_REASONS = frozenset({
    NETWORK_TIMEOUT,
    NETWORK_CONNECTION_RESET,
    NETWORK_SERVER_DISCONNECTED,
    NETWORK_DNS_FAILURE,
    NETWORK_CONNECTION_FAILED,
})


class NetworkError(SourceError):
    """Request never produced an HTTP response."""

    def __init__(self, reason: str, url: str, original_error: Optional[Exception] = None):
        message = f"Network error ({reason}) requesting {url}"
        if original_error is not None:
            message += f": {original_error}"
        context = {
            'reason': reason,
            'url': url,
            'original_error': str(original_error) if original_error is not None else None
        }
        super().__init__(message, context=context)
        self.reason = reason
        self.url = url

    @property
    def is_transient(self) -> bool:
        return self.reason in TRANSIENT_NETWORK_REASONS


class UpstreamUnavailableError(SourceError):
    """A transient upstream failure outlived every retry."""

    def __init__(self, operation: str, original_error: Exception):
        message = f"{operation} is temporarily unavailable. Please try again later."
        context = {
            'operation': operation,
            'original_error': str(original_error)
        }
        super().__init__(message, context=context)
        self.original_error = original_error


# Analysis-related exceptions
class AnalysisError(NewsAggregatorError):
    """Base exception for analysis errors."""
    pass


class LLMError(AnalysisError):
    """LLM/AI completion error."""

    def __init__(self, provider: str, model: str, detail: str, status_code: Optional[int] = None):
        message = f"LLM error from {provider} ({model}): {detail}"
        context = {
            'provider': provider,
            'model': model,
            'status_code': status_code,
            'detail': detail
        }
        super().__init__(message, context=context)
        self.status_code = status_code

    @property
    def is_transient(self) -> bool:
        if self.status_code is None:
            return False
        return self.status_code >= 500 or self.status_code == 429


class ResponseParseError(AnalysisError):
    """LLM output could not be parsed into the expected structure."""

    def __init__(self, parse_stage: str, original_error: Exception, raw_output: str = ""):
        message = f"Failed to parse {parse_stage}"
        context = {
            'parse_stage': parse_stage,
            'original_error': str(original_error),
            'raw_output': raw_output[:200]
        }
        super().__init__(message, context=context)


# Configuration-related exceptions
class ConfigurationError(NewsAggregatorError):
    """Configuration is invalid or missing."""

    def __init__(self, config_key: str, issue: str):
        message = f"Configuration error for {config_key}: {issue}"
        context = {
            'config_key': config_key,
            'issue': issue
        }
        super().__init__(message, context=context)


class MissingCredentialsError(ConfigurationError):
    """Required API credentials are not set."""

    def __init__(self, missing: List[str]):
        super().__init__(
            ', '.join(missing),
            "Missing API configuration. Please set the following environment variables"
        )
        self.missing = list(missing)
