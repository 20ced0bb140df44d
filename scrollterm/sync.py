#!/usr/bin/env python3
"""A mutex that remembers when a holder failed."""
import logging
import threading

from .error import LockPoisonedError


class PoisonLock:
    """Non-reentrant lock that is poisoned when a holder raises.

    Use it as a context manager. If the body raises, the lock is released
    and marked poisoned; every later acquisition raises `LockPoisonedError`
    until `clear_poison` is called. The caller decides whether the guarded
    state is still usable.

    Attributes:
        name (str): Name used in log and error messages
    """
    logger = logging.getLogger(__name__)

    def __init__(self, name='lock'):
        self.name = name
        self._lock = threading.Lock()
        self._poisoned = False

    @property
    def poisoned(self):
        return self._poisoned

    def clear_poison(self):
        """Accept the guarded state as consistent again."""
        with self._lock:
            was_poisoned = self._poisoned
            self._poisoned = False
        if was_poisoned:
            self.logger.info('%s: poison cleared', self.name)

    def __enter__(self):
        self._lock.acquire()
        if self._poisoned:
            self._lock.release()
            raise LockPoisonedError(
                '%s was poisoned by a previous holder' % self.name)
        return self

    def __exit__(self, exc_type, exc, tb):
        poisoned = (exc_type is not None
                    and not issubclass(exc_type, LockPoisonedError))
        if poisoned:
            self._poisoned = True
        self._lock.release()

        # Log only after release; a logging handler may need this lock
        if poisoned:
            self.logger.error('%s: poisoned by %s: %s',
                              self.name, exc_type.__name__, exc)
        return False
