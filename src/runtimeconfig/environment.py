"""Environment namespace abstraction.

Downstream code reads configuration from ``os.environ``, so the merge target
is the process environment. Everything that mutates it goes through an
``EnvironmentStore`` so tests can swap in a plain dict.
"""

import os
from abc import ABC, abstractmethod
from typing import Iterator, MutableMapping, Optional


class EnvironmentStore(ABC):
    """String-keyed, string-valued store used as the single merge target."""

    @abstractmethod
    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        pass

    @abstractmethod
    def keys(self) -> Iterator[str]:
        pass

    def as_dict(self) -> dict[str, str]:
        return {key: self.get(key) for key in self.keys()}


class _MappingEnvironment(EnvironmentStore):
    def __init__(self, mapping: MutableMapping[str, str]):
        self._mapping = mapping

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._mapping.get(key, default)

    def set(self, key: str, value: str) -> None:
        if value is None:
            value = ""
        self._mapping[key] = str(value)

    def has(self, key: str) -> bool:
        return key in self._mapping

    def keys(self) -> Iterator[str]:
        return iter(list(self._mapping.keys()))


class ProcessEnvironment(_MappingEnvironment):
    """Binds to the real ``os.environ``."""

    def __init__(self):
        super().__init__(os.environ)


class InMemoryEnvironment(_MappingEnvironment):
    """Dict-backed store for tests and dry runs."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(dict(initial or {}))
