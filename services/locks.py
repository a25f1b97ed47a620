"""
In-process keyed locks.

Reconciliation and number allocation are critical sections per key
(invoice id, or (prefix, year)). Database row locks cover multi-process
deployments; these locks serialize threads inside one worker, which is
also what protects SQLite where FOR UPDATE is a no-op.
"""
from contextlib import contextmanager
from threading import Lock
from typing import Hashable, Iterator


class KeyedLock:
     """A lock per key. Entries are dropped once no thread holds or waits on them."""

     def __init__(self):
          self._guard = Lock()
          self._locks: dict[Hashable, Lock] = {}
          self._waiters: dict[Hashable, int] = {}

     @contextmanager
     def hold(self, key: Hashable) -> Iterator[None]:
          with self._guard:
               lock = self._locks.setdefault(key, Lock())
               self._waiters[key] = self._waiters.get(key, 0) + 1
          lock.acquire()
          try:
               yield
          finally:
               lock.release()
               with self._guard:
                    self._waiters[key] -= 1
                    if self._waiters[key] == 0:
                         del self._waiters[key]
                         del self._locks[key]

     def __len__(self) -> int:
          with self._guard:
               return len(self._locks)


invoice_locks = KeyedLock()
sequence_locks = KeyedLock()
