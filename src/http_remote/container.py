"""Dependency injection container for http-remote.

Centralizes object creation and wiring for the CLI.

Design principles:
- Singleton instances for infrastructure (config, HTTP client, remote)
- On-demand creation for the awaitable client (no caching)
- Easy to mock for testing via overrides
- Lazy initialization

Factory functions:
- get_config(): Load and cache configuration
- get_http_client(): Create and cache the shared httpx.AsyncClient
- get_remote(): Create and cache the configured remote
- get_client(): Create an awaitable RemoteClient (no caching)
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import httpx

from http_remote.client import RemoteClient
from http_remote.config import Config
from http_remote.middleware import wrap_csrf_token, wrap_wire_request
from http_remote.remote import HttpRemote, Remote, create_remote

# Global container state for testing/mocking
_overrides: dict[str, Any] = {}


def set_override(key: str, value: Any) -> None:
    """Override a container dependency for testing.

    Args:
        key: Dependency key ("config", "http_client", "remote", "client")
        value: Mock or test implementation

    Example:
        >>> set_override("remote", MockRemote(handler=lambda payload: "pong"))
        >>> remote = get_remote()  # Returns the mock
        >>> clear_overrides()
    """
    _overrides[key] = value


def clear_overrides() -> None:
    """Clear all dependency overrides."""
    _overrides.clear()


@lru_cache(maxsize=1)
def get_config() -> Config:
    """Load and cache configuration.

    Returns:
        Configuration instance
    """
    if "config" in _overrides:
        override = _overrides["config"]
        if not isinstance(override, Config):
            raise TypeError("Override for 'config' must be a Config instance")
        return override

    return Config.load()


@lru_cache(maxsize=1)
def get_http_client() -> httpx.AsyncClient:
    """Create and cache the HTTP client shared by every transport.

    Returns:
        Async HTTP client bound to the configured base URL
    """
    if "http_client" in _overrides:
        override = _overrides["http_client"]
        if not isinstance(override, httpx.AsyncClient):
            raise TypeError("Override for 'http_client' must be an httpx.AsyncClient")
        return override

    config = get_config()
    return httpx.AsyncClient(
        base_url=config.remote.base_url,
        timeout=config.remote.timeout,
        verify=config.remote.verify_ssl,
    )


@lru_cache(maxsize=1)
def get_remote() -> Remote:
    """Create and cache the configured remote.

    Request middleware encodes the body, adds configured headers and, when
    set, the CSRF token.

    Returns:
        Remote instance
    """
    if "remote" in _overrides:
        return _overrides["remote"]  # type: ignore[no-any-return]

    config = get_config()
    request_middleware = wrap_csrf_token(
        wrap_wire_request(headers=config.remote.headers),
        token=config.remote.csrf_token,
    )
    remote: HttpRemote = create_remote(
        url=config.remote.endpoint,
        request_middleware=request_middleware,
        serial=config.remote.serial,
        client=get_http_client(),
    )
    return remote


def get_client() -> RemoteClient:
    """Create an awaitable client over ``get_remote()``.

    Returns:
        RemoteClient instance
    """
    if "client" in _overrides:
        override = _overrides["client"]
        if not isinstance(override, RemoteClient):
            raise TypeError("Override for 'client' must be a RemoteClient instance")
        return override

    return RemoteClient(get_remote())


async def close_container() -> None:
    """Close the cached HTTP client and drop the objects bound to it.

    Overridden clients belong to the caller and are left open.
    """
    if get_http_client.cache_info().currsize and "http_client" not in _overrides:
        await get_http_client().aclose()
    get_http_client.cache_clear()
    get_remote.cache_clear()


def reset_container() -> None:
    """Reset container state for testing.

    Clears all caches and overrides.
    """
    clear_overrides()
    get_config.cache_clear()
    get_http_client.cache_clear()
    get_remote.cache_clear()
