"""File tags: cheap content fingerprints peers use to detect changes."""

import logging
import os

logger = logging.getLogger(__name__)

MISSING_FILE_TAG = "-"


def get_file_tag(path: str | os.PathLike) -> str | None:
    """
    Compute the tag of a file from its inode and modification time.

    Args:
        path: File to fingerprint

    Returns:
        "1:<inode>-<seconds>.<nanoseconds>", "-" when the file does not
        exist, or None when it cannot be examined
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return MISSING_FILE_TAG
    except OSError as e:
        logger.debug("Cannot compute tag for %s: %s", path, e)
        return None

    seconds, nanoseconds = divmod(st.st_mtime_ns, 1_000_000_000)
    return f"1:{st.st_ino}-{seconds}.{nanoseconds}"
