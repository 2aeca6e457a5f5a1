#!/usr/bin/env python3
"""
Dependency Injection Container

Named service registry used by the CLI commands. Process-lifetime objects
(configuration, the shared cache) are singletons; objects bound to an open
HTTP session are assembled per run by ``build_services``.

Everything runs on one asyncio loop in one thread, so the registry takes no
locks.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, TypeVar
from functools import wraps

logger = logging.getLogger(__name__)

T = TypeVar('T')


def singleton(factory_func: Callable[[], T]) -> Callable[[], T]:
    """
    Mark a factory so the container caches its first result.

    Usage:
        @singleton
        def create_cache():
            return TTLCache()
    """
    if getattr(factory_func, '_is_singleton', False):
        return factory_func

    @wraps(factory_func)
    def wrapper():
        return factory_func()

    wrapper._is_singleton = True
    return wrapper


class Container:
    """Registry of service factories and resolved instances."""

    def __init__(self):
        self._factories: Dict[str, Callable[[], Any]] = {}
        self._instances: Dict[str, Any] = {}

    def register_singleton(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a factory whose first result is reused."""
        self._factories[service_name] = singleton(factory)
        self._instances.pop(service_name, None)

    def register_factory(self, service_name: str, factory: Callable[[], T]) -> None:
        """Register a factory called on every get()."""
        self._factories[service_name] = factory
        self._instances.pop(service_name, None)

    def register_instance(self, service_name: str, instance: T) -> None:
        """Register a ready-made object (tests inject fakes this way)."""
        self._instances[service_name] = instance

    def get(self, service_name: str) -> Any:
        """
        Resolve a service by name.

        Raises:
            KeyError: If nothing is registered under the name
        """
        if service_name in self._instances:
            return self._instances[service_name]

        factory = self._factories.get(service_name)
        if factory is None:
            raise KeyError(f"Service '{service_name}' not registered")

        instance = factory()
        if getattr(factory, '_is_singleton', False):
            self._instances[service_name] = instance
            logger.debug(f"Created singleton instance for '{service_name}'")
        return instance

    def clear(self) -> None:
        self._factories.clear()
        self._instances.clear()


# Global container instance
_container: Optional[Container] = None


def get_container() -> Container:
    """Get the process-wide container, registering default services on first use."""
    global _container
    if _container is None:
        _container = Container()
        _setup_default_services(_container)
    return _container


def reset_container() -> None:
    """Reset global container (useful for testing)."""
    global _container
    if _container:
        _container.clear()
    _container = None


def retry_policy_from_config(config):
    """Base retry policy built from FetchConfig values."""
    from core.retry import RetryPolicy
    fetch = config.fetch
    return RetryPolicy(
        max_retries=fetch.retry_max_retries,
        initial_delay_ms=fetch.retry_initial_delay_ms,
        backoff_multiplier=fetch.retry_backoff_multiplier,
        max_delay_ms=fetch.retry_max_delay_ms,
        retry_immediately_once=fetch.retry_immediately_once,
    )


def _setup_default_services(container: Container) -> None:
    """Set up default service registrations with configuration injection."""

    def create_config():
        from core.config import get_config
        return get_config()

    def create_cache():
        from core.cache import TTLCache
        return TTLCache()

    def create_http_client():
        from core.http_client import JsonHttpClient
        config = container.get('config')
        return JsonHttpClient(
            timeout=config.fetch.request_timeout,
            user_agent=config.fetch.user_agent,
            retry_policy=retry_policy_from_config(config),
        )

    def create_openai_client():
        from integrations.openai_client import OpenAIClient
        from core.exceptions import MissingCredentialsError
        config = container.get('config')
        if not config.has_openai():
            raise MissingCredentialsError(['OPENAI_API_KEY'])
        return OpenAIClient(
            api_key=config.integrations.openai_api_key,
            model=config.integrations.openai_model,
            temperature=config.integrations.openai_temperature,
            retry_policy=retry_policy_from_config(config),
        )

    container.register_singleton('config', create_config)
    container.register_singleton('cache', create_cache)

    # Non-singletons
    container.register_factory('http_client', create_http_client)
    container.register_factory('openai_client', create_openai_client)

    logger.debug("Default services registered in container")


@dataclass
class Services:
    """Session-bound services for one command run."""
    source: Any
    fetcher: Any
    entity_extractor: Any
    analysis: Any
    reports: Any


def build_services(container: Container, http_client, llm_client=None) -> Services:
    """
    Wire the analysis stack around an open HTTP client.

    Args:
        container: Container holding config and the shared cache
        http_client: Entered JsonHttpClient
        llm_client: LLM client override; by default one is created when
            OpenAI is configured, otherwise entity extraction is skipped

    Returns:
        Services bundle
    """
    from core.sources.newsdatahub import NewsDataHubClient
    from core.topic_fetcher import TopicArticleFetcher
    from core.analysis import EntityExtractor, ReportService, TopicAnalysisService

    config = container.get('config')
    cache = container.get('cache')

    if llm_client is None and config.has_openai():
        llm_client = container.get('openai_client')

    source = NewsDataHubClient(http_client, cache, config)
    fetcher = TopicArticleFetcher(source, cache, config.fetch)
    entity_extractor = EntityExtractor(llm_client, cache, config)
    analysis = TopicAnalysisService(cache, fetcher, entity_extractor, config)
    reports = ReportService(cache, analysis, llm_client, config)

    return Services(
        source=source,
        fetcher=fetcher,
        entity_extractor=entity_extractor,
        analysis=analysis,
        reports=reports,
    )
