"""Rolling file sink writer with time-bucketed rotation and count retention."""

import os
import threading
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import TextIO

from logrouter.core.diagnostics import report
from logrouter.core.errors import ConfigurationError, RetentionCleanupError
from logrouter.core.formatting import (
    DEFAULT_OUTPUT_TEMPLATE,
    format_event,
    validate_template,
)
from logrouter.core.models import LogEvent
from logrouter.core.rotation import BucketPath, RollingInterval

DEFAULT_RETAINED_FILE_COUNT_LIMIT = 31

_NOT_OPENED = object()


class RollingFileWriter:
    """Appends formatted events to one file per rotation bucket.

    On every write the current local time is mapped to its bucket; crossing
    a bucket boundary closes the open file and opens (or creates) the file
    of the new bucket, then sweeps old files so that at most
    ``retained_file_count_limit`` remain. The file of the current bucket is
    never swept.

    All file access is serialized by a per-writer lock, so the writer can be
    shared by any number of producer threads.

    Args:
        path: Path template. The bucket stamp replaces ``{bucket}`` in the
            file name, or is inserted before the extension.
        name: Name used in diagnostics (defaults to the path template).
        template: Output template, see ``format_event``.
        rolling_interval: Bucket size.
        retained_file_count_limit: Files kept after a sweep, current
            included. None keeps everything.
        buffered: If False, flush after every event.
        encoding: File encoding.
        clock: Returns the current local time; injectable for tests.

    Raises:
        ConfigurationError: If the options are invalid or the target
            directory cannot be created or written to.
    """

    def __init__(
        self,
        path: str | Path,
        *,
        name: str | None = None,
        template: str = DEFAULT_OUTPUT_TEMPLATE,
        rolling_interval: RollingInterval = RollingInterval.DAY,
        retained_file_count_limit: int | None = DEFAULT_RETAINED_FILE_COUNT_LIMIT,
        buffered: bool = False,
        encoding: str = "utf-8",
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if retained_file_count_limit is not None and retained_file_count_limit < 1:
            raise ConfigurationError(
                f"retained_file_count_limit must be at least 1, got {retained_file_count_limit}"
            )
        try:
            validate_template(template)
            self._paths = BucketPath(path, rolling_interval)
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        self.name = name or str(path)
        self._template = template
        self._interval = rolling_interval
        self._retained_file_count_limit = retained_file_count_limit
        self._buffered = buffered
        self._encoding = encoding
        self._clock = clock or datetime.now
        self._lock = threading.Lock()
        self._file: TextIO | None = None
        self._bucket: object = _NOT_OPENED
        self._current_path: Path | None = None
        self._closed = False
        self._ensure_directory()

    def _ensure_directory(self) -> None:
        directory = self._paths.directory
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ConfigurationError(
                f"Cannot create log directory {directory} for sink {self.name!r}: {e}"
            ) from e
        if not os.access(directory, os.W_OK | os.X_OK):
            raise ConfigurationError(
                f"Log directory {directory} for sink {self.name!r} is not writable"
            )

    @property
    def current_path(self) -> Path | None:
        """Path of the open bucket file, or None before the first write."""
        return self._current_path

    @property
    def closed(self) -> bool:
        return self._closed

    def write(self, event: LogEvent) -> None:
        """Format an event and append it to the current bucket's file."""
        text = format_event(event, self._template)
        with self._lock:
            if self._closed:
                return
            self._align_to(self._clock())
            self._file.write(text)  # type: ignore[union-attr]
            if not self._buffered:
                self._file.flush()

    def flush(self) -> None:
        with self._lock:
            if self._file is not None:
                self._file.flush()

    def close(self) -> None:
        with self._lock:
            self._closed = True
            self._close_file()

    def _align_to(self, now: datetime) -> None:
        bucket = self._interval.bucket_start(now)
        if self._file is not None and bucket == self._bucket:
            return
        self._close_file()
        path = self._paths.path_for(bucket)
        self._file = open(path, "a", encoding=self._encoding, newline="")
        self._bucket = bucket
        self._current_path = path
        self._apply_retention(path)

    def _close_file(self) -> None:
        if self._file is None:
            return
        try:
            self._file.flush()
            self._file.close()
        finally:
            self._file = None

    def _apply_retention(self, current: Path) -> None:
        limit = self._retained_file_count_limit
        if limit is None or self._interval is RollingInterval.INFINITE:
            return
        others = [p for _, p in self._paths.existing_files() if p != current]
        excess = len(others) - (limit - 1)
        for stale in others[: max(0, excess)]:
            try:
                stale.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                report(RetentionCleanupError(str(stale), e))
