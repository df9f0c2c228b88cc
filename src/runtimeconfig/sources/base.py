"""Abstract base class for configuration sources.

A source produces ``(key, value)`` pairs lazily. The merger decides what
to do with them; sources never write to the environment themselves.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import AsyncIterable, AsyncIterator, Awaitable, Generic, TypeVar

from azure.core.exceptions import (
    ClientAuthenticationError,
    HttpResponseError,
    ServiceRequestError,
)


TConfig = TypeVar('TConfig')
T = TypeVar('T')

# HTTP statuses that mean the identity is not allowed in
ACCESS_DENIED_STATUS = (401, 403)

PERMISSION_HINT = (
    "Ensure your managed identity or service principal has GET/LIST permissions."
)


class ConfigSource(ABC, Generic[TConfig]):
    """Base class for all configuration sources.

    Provides common functionality:
    - Configuration management
    - Lifecycle management (init/shutdown)
    """

    name = "source"

    def __init__(self, config: TConfig):
        self.config = config
        self._initialized = False

    @abstractmethod
    async def initialize(self) -> None:
        """Initialize the source. Called once before first use."""
        pass

    @abstractmethod
    async def shutdown(self) -> None:
        """Release clients and connections."""
        pass

    @abstractmethod
    def list_and_resolve_all(self) -> AsyncIterator[tuple[str, str]]:
        """Yield every ``(key, value)`` pair this source contributes, in order."""
        pass

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def __aenter__(self):
        if not self._initialized:
            await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.shutdown()


def is_access_failure(exc: BaseException) -> bool:
    """Return True when ``exc`` means the remote store could not be accessed.

    Covers rejected credentials, 401/403 responses, unreachable endpoints
    and per-call timeouts.
    """
    if isinstance(exc, asyncio.TimeoutError):
        return True
    if isinstance(exc, (ClientAuthenticationError, ServiceRequestError)):
        return True
    if isinstance(exc, HttpResponseError):
        return exc.status_code in ACCESS_DENIED_STATUS
    return False


async def call_with_timeout(awaitable: Awaitable[T], timeout_seconds: float) -> T:
    return await asyncio.wait_for(awaitable, timeout=timeout_seconds)


async def iterate_with_timeout(
    iterable: AsyncIterable[T],
    timeout_seconds: float,
) -> AsyncIterator[T]:
    """Iterate an async pager, bounding the wait for each item.

    Items are pulled one at a time; the next page is only requested once
    the consumer has drained the current one.
    """
    iterator = iterable.__aiter__()
    while True:
        try:
            item = await asyncio.wait_for(iterator.__anext__(), timeout=timeout_seconds)
        except StopAsyncIteration:
            return
        yield item
