import logging
import pwd
import sqlite3
import threading
from collections.abc import Callable

from .models import User
from .UsageStore import UsageStore

logger: logging.Logger = logging.getLogger(__name__)


def get_username(uid: int) -> str | None:
    """Map a uid to its login name, or None when the uid has no entry."""
    try:
        return pwd.getpwuid(uid).pw_name
    except KeyError:
        return None


class UidCache:
    """Uids whose User row has already been ensured during this run."""

    def __init__(self) -> None:
        self._uids: set[int] = set()
        self._lock: threading.Lock = threading.Lock()

    def __contains__(self, uid: object) -> bool:
        with self._lock:
            return uid in self._uids

    def __len__(self) -> int:
        with self._lock:
            return len(self._uids)

    def add(self, uid: int) -> None:
        with self._lock:
            self._uids.add(uid)


class IdentityResolver:
    def __init__(
        self,
        store: UsageStore,
        cache: UidCache,
        lookup: Callable[[int], str | None] = get_username,
    ) -> None:
        self.store: UsageStore = store
        self.cache: UidCache = cache
        self.lookup: Callable[[int], str | None] = lookup

    def resolve(self, owner_uid: int | None) -> int | None:
        """
        Make sure a User row exists for ``owner_uid`` and return the id to
        store as owner.

        A cache hit returns straight away. Concurrent first sightings of the
        same uid may both upsert; the upsert is idempotent. When the row
        cannot be written the owner is reported as None and the uid is left
        out of the cache so a later entry tries again.
        """
        if owner_uid is None:
            return None

        if owner_uid in self.cache:
            return owner_uid

        try:
            if not self.store.users.exists(owner_uid):
                username: str | None = self.lookup(owner_uid)
                if username is None:
                    logger.info("Unknown owner uid %s, storing without a username", owner_uid)
                self.store.upsert_user(User(user_id=owner_uid, username=username))
        except sqlite3.Error as e:
            logger.error("Failed to insert user %s: %s", owner_uid, e)
            return None

        self.cache.add(owner_uid)
        return owner_uid
