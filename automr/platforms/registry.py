"""
CI Provider Registry - Platform name to provider class lookup.

Thread-safe singleton. Built-in platforms are registered by
register_builtin_providers(); create_provider() wires a provider from a
git remote URL and the loaded configuration.
"""

import os
import threading
from typing import Any, Callable, Dict, List, Optional, Type

from loguru import logger

from automr.config.models import AppConfig
from automr.platforms.remote import RemoteInfo, parse_remote

TOKEN_ENV_VARS = {
    "github": "GITHUB_TOKEN",
    "gitlab": "GITLAB_TOKEN",
}


class ProviderRegistry:
    """
    Registry for CI provider registration and lookup.

    Usage:
        registry = get_provider_registry()
        registry.register("github", GitHubProvider)
        provider = registry.get("github", owner="acme", repo="api")
    """

    _instance: Optional["ProviderRegistry"] = None
    _lock: threading.Lock = threading.Lock()
    _providers: Dict[str, Type[Any]]
    _factories: Dict[str, Callable[..., Any]]
    _registry_lock: threading.RLock

    def __new__(cls) -> "ProviderRegistry":
        if cls._instance is None:
            with cls._lock:
                # Double-check locking pattern
                if cls._instance is None:
                    instance = super().__new__(cls)
                    instance._providers = {}
                    instance._factories = {}
                    instance._registry_lock = threading.RLock()
                    cls._instance = instance
        return cls._instance

    def register(
        self,
        name: str,
        provider_class: Type[Any],
        factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        """Register a provider class (and optional factory) under a platform name."""
        with self._registry_lock:
            if name in self._providers:
                logger.warning(f"CI provider '{name}' already registered, overwriting")
            self._providers[name] = provider_class
            if factory:
                self._factories[name] = factory
        logger.debug(f"Registered CI provider: {name}")

    def get(self, name: str, **kwargs) -> Any:
        """
        Instantiate a provider by platform name.

        Raises:
            KeyError: If the platform is not registered
        """
        with self._registry_lock:
            if name not in self._providers:
                available = ", ".join(self._providers.keys()) or "none"
                raise KeyError(f"CI provider '{name}' not found. Available: {available}")
            provider_class = self._providers[name]
            factory = self._factories.get(name)

        if factory:
            return factory(**kwargs)
        return provider_class(**kwargs)

    def has(self, name: str) -> bool:
        with self._registry_lock:
            return name in self._providers

    def list_all(self) -> List[str]:
        with self._registry_lock:
            return list(self._providers.keys())

    def clear(self) -> None:
        """Clear all registered providers (useful for testing)."""
        with self._registry_lock:
            self._providers.clear()
            self._factories.clear()

    @classmethod
    def reset_instance(cls) -> None:
        """Reset singleton instance (useful for testing)."""
        with cls._lock:
            cls._instance = None


def get_provider_registry() -> ProviderRegistry:
    """Get the global provider registry."""
    return ProviderRegistry()


def register_builtin_providers() -> ProviderRegistry:
    """Register GitHub and GitLab providers."""
    from automr.platforms.github import GitHubProvider
    from automr.platforms.gitlab import GitLabProvider

    registry = get_provider_registry()
    if not registry.has("github"):
        registry.register("github", GitHubProvider, factory=_github_factory)
    if not registry.has("gitlab"):
        registry.register("gitlab", GitLabProvider, factory=_gitlab_factory)
    return registry


def detect_platform(host: str) -> str:
    """
    Map a remote host to a platform name.

    Raises:
        ValueError: If the host is neither GitHub nor GitLab
    """
    host = host.lower()
    if "github" in host:
        return "github"
    if "gitlab" in host:
        return "gitlab"
    raise ValueError(f"Unsupported git host: {host} (expected GitHub or GitLab)")


def _github_factory(remote: RemoteInfo, api_url: Optional[str] = None, **kwargs):
    from automr.platforms.github import GitHubProvider

    if api_url is None and remote.host != "github.com":
        # GitHub Enterprise Server
        api_url = f"https://{remote.host}/api/v3"
    return GitHubProvider(owner=remote.owner, repo=remote.repo, api_url=api_url, **kwargs)


def _gitlab_factory(remote: RemoteInfo, api_url: Optional[str] = None, **kwargs):
    from automr.platforms.gitlab import GitLabProvider

    if api_url is None and remote.host != "gitlab.com":
        api_url = f"https://{remote.host}/api/v4"
    return GitLabProvider(project_path=remote.path, api_url=api_url, **kwargs)


def create_provider(remote_url: str, config: Optional[AppConfig] = None) -> Any:
    """
    Build the CI provider for a git remote.

    The token comes from GITHUB_TOKEN or GITLAB_TOKEN. The API URL, assignee
    and reviewer come from the platform section of the config, with the API
    URL falling back to the remote host.
    """
    config = config or AppConfig()
    remote = parse_remote(remote_url)
    platform = detect_platform(remote.host)
    platform_config = config.for_platform(platform)

    token = os.environ.get(TOKEN_ENV_VARS[platform])
    if not token:
        logger.warning(f"{TOKEN_ENV_VARS[platform]} is not set, API access may be limited")

    registry = register_builtin_providers()
    logger.debug(f"Creating {platform} provider for {remote.host}/{remote.path}")
    return registry.get(
        platform,
        remote=remote,
        api_url=platform_config.api_url,
        token=token,
        assignee=platform_config.assignee,
        reviewer=platform_config.reviewer,
    )
