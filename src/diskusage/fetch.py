import logging
import os
from datetime import datetime, timezone

from .models import PathMetadata

logger: logging.Logger = logging.getLogger(__name__)


def modified_at(st: os.stat_result, path: str) -> datetime | None:
    try:
        return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)
    except (OverflowError, OSError, ValueError) as e:
        logger.error("Error getting modified time of %s: %s", path, e)
        return None


def fetch_metadata(path: str) -> PathMetadata | None:
    """
    Read size, owner uid and modification time of a single path.

    Returns None when the path vanished before it could be read, in which
    case the entry should be skipped. Any other failure is logged and the
    fields fall back to size 0, no owner and no modification time.
    """
    try:
        st: os.stat_result = os.stat(path)
    except FileNotFoundError:
        logger.warning("Skipping %s: no longer exists", path)
        return None
    except OSError as e:
        logger.error("Error getting metadata of %s: %s", path, e)
        return PathMetadata(size=0, owner_uid=None, last_modified=None)

    return PathMetadata(size=st.st_size, owner_uid=st.st_uid, last_modified=modified_at(st, path))
