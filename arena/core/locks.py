# arena/core/locks.py
import threading
from contextlib import contextmanager

from arena.core.exceptions import StorageTimeout


class KeyedLocks:
    """Per-key mutexes with bounded acquisition.

    Entries are reference counted and dropped when the last holder leaves,
    so the registry only ever holds keys that are in use.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[object, list] = {}  # key -> [lock, refcount]

    @contextmanager
    def hold(self, key, timeout: float):
        with self._guard:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1

        acquired = entry[0].acquire(timeout=timeout)
        try:
            if not acquired:
                raise StorageTimeout("Another vote for this key is still being recorded")
            yield
        finally:
            if acquired:
                entry[0].release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._guard:
            return len(self._locks)


# Shared by every admission attempt in this process
vote_locks = KeyedLocks()

# Contest window checks and the writes that follow them
schedule_locks = KeyedLocks()
