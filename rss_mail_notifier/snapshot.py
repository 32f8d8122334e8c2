"""Durable storage of the last notified feed document."""

import logging
import os
import shutil
import tempfile

from .errors import ParseError, StorageError, from_io_error
from .models import FeedDocument
from .rss_client import FeedParser

logger = logging.getLogger(__name__)


def _copy_mode(target: str, tmp_path: str) -> None:
    """Give the temporary file the permissions the snapshot should end up with."""
    if os.path.exists(target):
        shutil.copymode(target, tmp_path)
        return
    # mkstemp creates 0600; a fresh snapshot gets the usual umask-derived mode
    umask = os.umask(0)
    os.umask(umask)
    os.chmod(tmp_path, 0o666 & ~umask)


class SnapshotStore:
    """Loads and saves the feed snapshot file."""

    def __init__(self, parser: FeedParser):
        self.parser = parser

    def load(self, path: str) -> FeedDocument:
        """
        Read the snapshot at ``path`` and parse it like a fetched body.

        A missing snapshot is an error, not an empty feed: without it there is
        no way to tell which items were already notified.

        Raises:
            StorageError: If the file is absent, unreadable or unparsable.
        """
        try:
            with open(path, "rb") as f:
                raw = f.read()
        except OSError as e:
            raise from_io_error(e, path) from e

        try:
            document = self.parser.parse(raw, path)
        except ParseError as e:
            raise StorageError(f"snapshot {path} is corrupt: {e.message}", {"path": path}) from e

        logger.info(f"Loaded snapshot {path} with {len(document.items)} items")
        return document

    def save(self, path: str, document: FeedDocument) -> None:
        """
        Replace the snapshot at ``path`` with ``document.raw``.

        The bytes go to a temporary file in the same directory which is then
        renamed over the target, so readers only ever see the old or the new
        snapshot in full.

        Raises:
            StorageError: If the file cannot be written.
        """
        directory = os.path.dirname(os.path.abspath(path))
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(prefix=".snapshot-", suffix=".tmp", dir=directory)
            with os.fdopen(fd, "wb") as f:
                f.write(document.raw)
                f.flush()
                os.fsync(f.fileno())
            _copy_mode(path, tmp_path)
            os.replace(tmp_path, path)
            tmp_path = None
        except OSError as e:
            raise from_io_error(e, path) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.info(f"Saved snapshot {path} ({len(document.raw)} bytes)")
