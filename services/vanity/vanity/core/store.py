import threading, time
from contextlib import contextmanager
from types import MappingProxyType
from typing import Iterator, Mapping, Optional
from .config import RepositoryEntry

class RWLock:
    """Many readers or one writer. A waiting writer blocks new readers."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False
        self._writers_waiting = 0

    @contextmanager
    def read_locked(self) -> Iterator[None]:
        with self._cond:
            while self._writer or self._writers_waiting:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self) -> Iterator[None]:
        with self._cond:
            self._writers_waiting += 1
            try:
                while self._writer or self._readers:
                    self._cond.wait()
            finally:
                self._writers_waiting -= 1
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()

class ConfigStore:
    """Holds the current path -> entry mapping; swapped wholesale on reload."""

    def __init__(self):
        self._lock = RWLock()
        self._mapping: Mapping[str, RepositoryEntry] = MappingProxyType({})
        self._generation = 0
        self._loaded_at: float | None = None

    def replace(self, mapping: Mapping[str, RepositoryEntry]) -> int:
        if not isinstance(mapping, MappingProxyType):
            mapping = MappingProxyType(dict(mapping))
        with self._lock.write_locked():
            self._mapping = mapping
            self._generation += 1
            self._loaded_at = time.time()
            return self._generation

    def lookup(self, path: str) -> Optional[RepositoryEntry]:
        with self._lock.read_locked():
            return self._mapping.get(path)

    def snapshot(self) -> Mapping[str, RepositoryEntry]:
        with self._lock.read_locked():
            return self._mapping

    @property
    def generation(self) -> int:
        with self._lock.read_locked():
            return self._generation

    @property
    def loaded_at(self) -> float | None:
        with self._lock.read_locked():
            return self._loaded_at

    def __len__(self) -> int:
        with self._lock.read_locked():
            return len(self._mapping)
