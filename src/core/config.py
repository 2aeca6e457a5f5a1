#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration,
including environment variables, defaults, and validation.

Credentials are optional at load time; the components that need them check
``missing_credentials()`` before their first network call.
"""

import os
import logging
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List

from .env_loader import load_env_file
from .exceptions import ConfigurationError, MissingCredentialsError

logger = logging.getLogger(__name__)


@dataclass
class NewsApiConfig:
    """Article search API configuration."""
    base_url: str = "https://api.newsdatahub.com"
    api_key: Optional[str] = None


@dataclass
class IntegrationConfig:
    """External integration configuration."""
    openai_api_key: Optional[str] = None
    openai_model: str = "gpt-4o-mini"
    openai_temperature: float = 0.3


@dataclass
class CacheConfig:
    """Cache TTL classes, in seconds."""
    ttl_historical_seconds: int = 86400  # 24 hours
    ttl_current_day_seconds: int = 3600  # 1 hour


@dataclass
class FetchConfig:
    """Pagination, HTTP and retry settings."""
    page_size: int = 100
    max_pagination_loops: int = 20
    request_timeout: int = 30
    user_agent: str = "Mozilla/5.0 (compatible; TopicCoverage/1.0)"

    # Thin result sets get padded with related articles
    min_articles_before_related: int = 3
    max_related_lookups: int = 2

    retry_max_retries: int = 3
    retry_initial_delay_ms: int = 1000
    retry_backoff_multiplier: float = 2.0
    retry_max_delay_ms: int = 10000
    retry_immediately_once: bool = True


@dataclass
class ApplicationConfig:
    """Core application configuration."""
    # Aggregation limits
    top_keywords_limit: int = 10
    top_sources_limit: int = 10
    representative_articles_limit: int = 20

    # Entity extraction
    min_articles_for_entities: int = 10
    max_articles_for_entities: int = 100

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass
class Config:
    """Master configuration container."""
    news_api: NewsApiConfig = field(default_factory=NewsApiConfig)
    integrations: IntegrationConfig = field(default_factory=IntegrationConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    app: ApplicationConfig = field(default_factory=ApplicationConfig)

    def has_news_api(self) -> bool:
        return bool(self.news_api.api_key and self.news_api.api_key.strip())

    def has_openai(self) -> bool:
        """Check if OpenAI integration is available."""
        return bool(self.integrations.openai_api_key and self.integrations.openai_api_key.strip())

    def missing_credentials(self) -> List[str]:
        """Names of required credential variables that are unset."""
        missing = []
        if not self.has_news_api():
            missing.append('NEWSDATAHUB_API_KEY')
        if not self.has_openai():
            missing.append('OPENAI_API_KEY')
        return missing

    def require_credentials(self, *names: str) -> None:
        """
        Raise before any network attempt if required credentials are absent.

        Args:
            names: Subset of variable names to check (defaults to all)
        """
        missing = self.missing_credentials()
        if names:
            missing = [name for name in missing if name in names]
        if missing:
            raise MissingCredentialsError(missing)


def _redact(secret: Optional[str]) -> str:
    if not secret:
        return 'NOT SET'
    return '***' + secret[-4:]


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self, env_file_path: str = ".env", load_env: bool = True):
        """
        Initialize configuration manager.

        Args:
            env_file_path: Path to .env file relative to project root
            load_env: Whether to read the .env file at all
        """
        self._config: Optional[Config] = None
        if load_env:
            load_env_file(env_file_path)

    def get_config(self, force_reload: bool = False) -> Config:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Complete configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> Config:
        """Build configuration from environment variables."""
        news_api_config = NewsApiConfig(
            base_url=os.getenv('NEWSDATAHUB_BASE_URL', 'https://api.newsdatahub.com').rstrip('/'),
            api_key=os.getenv('NEWSDATAHUB_API_KEY') or None,
        )

        integration_config = IntegrationConfig(
            openai_api_key=os.getenv('OPENAI_API_KEY') or None,
            openai_model=os.getenv('OPENAI_MODEL', 'gpt-4o-mini'),
            openai_temperature=self._get_float('OPENAI_TEMPERATURE', 0.3),
        )

        cache_config = CacheConfig(
            ttl_historical_seconds=self._get_int('CACHE_TTL_HISTORICAL', 86400),
            ttl_current_day_seconds=self._get_int('CACHE_TTL_CURRENT_DAY', 3600),
        )

        fetch_config = FetchConfig(
            page_size=self._get_int('NEWS_PAGE_SIZE', 100),
            max_pagination_loops=self._get_int('MAX_PAGINATION_LOOPS', 20),
            request_timeout=self._get_int('REQUEST_TIMEOUT', 30),
            user_agent=os.getenv('HTTP_USER_AGENT', 'Mozilla/5.0 (compatible; TopicCoverage/1.0)'),
            min_articles_before_related=self._get_int('MIN_ARTICLES_BEFORE_RELATED', 3),
            max_related_lookups=self._get_int('MAX_RELATED_LOOKUPS', 2),
            retry_max_retries=self._get_int('RETRY_MAX_RETRIES', 3),
            retry_initial_delay_ms=self._get_int('RETRY_INITIAL_DELAY_MS', 1000),
            retry_backoff_multiplier=self._get_float('RETRY_BACKOFF_MULTIPLIER', 2.0),
            retry_max_delay_ms=self._get_int('RETRY_MAX_DELAY_MS', 10000),
            retry_immediately_once=os.getenv('RETRY_IMMEDIATELY_ONCE', 'true').lower() == 'true',
        )

        app_config = ApplicationConfig(
            top_keywords_limit=self._get_int('TOP_KEYWORDS_LIMIT', 10),
            top_sources_limit=self._get_int('TOP_SOURCES_LIMIT', 10),
            representative_articles_limit=self._get_int('REPRESENTATIVE_ARTICLES_LIMIT', 20),
            min_articles_for_entities=self._get_int('MIN_ARTICLES_FOR_ENTITIES', 10),
            max_articles_for_entities=self._get_int('MAX_ARTICLES_FOR_ENTITIES', 100),
            log_level=os.getenv('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=os.getenv('VERBOSE_LOGGING', 'false').lower() == 'true',
        )

        config = Config(
            news_api=news_api_config,
            integrations=integration_config,
            cache=cache_config,
            fetch=fetch_config,
            app=app_config,
        )

        self._validate_config(config)
        return config

    def _get_int(self, key: str, default: int) -> int:
        raw = os.getenv(key)
        if raw is None or raw.strip() == '':
            return default
        try:
            return int(raw)
        except ValueError:
            raise ConfigurationError(key, f"expected an integer, got '{raw}'")

    def _get_float(self, key: str, default: float) -> float:
        raw = os.getenv(key)
        if raw is None or raw.strip() == '':
            return default
        try:
            return float(raw)
        except ValueError:
            raise ConfigurationError(key, f"expected a number, got '{raw}'")

    def _validate_config(self, config: Config) -> None:
        """Validate configuration values."""
        errors = []

        if not config.news_api.base_url.startswith(('https://', 'http://')):
            errors.append("NEWSDATAHUB_BASE_URL must start with http:// or https://")

        if config.cache.ttl_historical_seconds < 1 or config.cache.ttl_current_day_seconds < 1:
            errors.append("CACHE_TTL_HISTORICAL and CACHE_TTL_CURRENT_DAY must be at least 1 second")

        if config.fetch.page_size < 1 or config.fetch.page_size > 100:
            errors.append("NEWS_PAGE_SIZE must be between 1 and 100")

        if config.fetch.max_pagination_loops < 1:
            errors.append("MAX_PAGINATION_LOOPS must be at least 1")

        if config.fetch.request_timeout < 1:
            errors.append("REQUEST_TIMEOUT must be at least 1 second")

        if config.fetch.retry_max_retries < 0:
            errors.append("RETRY_MAX_RETRIES must not be negative")

        if config.fetch.retry_backoff_multiplier < 1:
            errors.append("RETRY_BACKOFF_MULTIPLIER must be at least 1")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.app.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ConfigurationError('environment', '; '.join(errors))

        logger.debug("Configuration validation passed")

    def update_logging(self) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        numeric_level = getattr(logging, config.app.log_level)
        logging.getLogger().setLevel(numeric_level)

        if config.app.verbose_logging:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))

    def describe(self) -> Dict[str, Any]:
        """Configuration summary with secrets redacted."""
        config = self.get_config()
        return {
            'environment': config.environment,
            'news_api_url': config.news_api.base_url,
            'news_api_key': _redact(config.news_api.api_key),
            'openai_model': config.integrations.openai_model,
            'openai_api_key': _redact(config.integrations.openai_api_key),
            'cache_ttl_historical': config.cache.ttl_historical_seconds,
            'cache_ttl_current_day': config.cache.ttl_current_day_seconds,
            'max_pagination_loops': config.fetch.max_pagination_loops,
            'missing_credentials': config.missing_credentials(),
        }


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> Config:
    """Get application configuration."""
    return get_config_manager().get_config()


def reset_config() -> None:
    """Reset configuration manager (useful for testing)."""
    global _config_manager
    _config_manager = None
