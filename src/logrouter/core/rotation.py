"""Time-bucketed file rotation policy.

A rolling interval splits local time into buckets. Each bucket maps to one
physical file whose name carries the bucket's start stamp, either at a
``{bucket}`` placeholder in the path template or just before the
extension (``log.txt`` becomes ``log20240131.txt`` for daily rolling).
"""

import re
from datetime import datetime
from enum import Enum
from pathlib import Path

BUCKET_PLACEHOLDER = "{bucket}"


class RollingInterval(Enum):
    """Calendar interval at which a new file is started.

    The value is the ``strftime`` format of the bucket stamp.
    """

    INFINITE = ""
    YEAR = "%Y"
    MONTH = "%Y%m"
    DAY = "%Y%m%d"
    HOUR = "%Y%m%d%H"
    MINUTE = "%Y%m%d%H%M"

    @classmethod
    def parse(cls, value: "str | RollingInterval") -> "RollingInterval":
        """Parse an interval from its case-insensitive name."""
        if isinstance(value, RollingInterval):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValueError(f"Invalid rolling interval: {value!r}") from None

    @property
    def stamp_length(self) -> int:
        """Number of digits in a bucket stamp."""
        return len(datetime(2000, 1, 1).strftime(self.value)) if self.value else 0

    def bucket_start(self, moment: datetime) -> datetime | None:
        """Truncate a moment to the start of its bucket.

        Returns:
            The bucket start, or None for INFINITE (a single bucket).
        """
        if self is RollingInterval.INFINITE:
            return None
        if self is RollingInterval.YEAR:
            return moment.replace(
                month=1, day=1, hour=0, minute=0, second=0, microsecond=0
            )
        if self is RollingInterval.MONTH:
            return moment.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
        if self is RollingInterval.DAY:
            return moment.replace(hour=0, minute=0, second=0, microsecond=0)
        if self is RollingInterval.HOUR:
            return moment.replace(minute=0, second=0, microsecond=0)
        return moment.replace(second=0, microsecond=0)


class BucketPath:
    """Maps rotation buckets to file paths and back.

    Args:
        template: File path, optionally containing ``{bucket}`` in its
            file name.
        interval: Rolling interval of the sink.

    Raises:
        ValueError: If the placeholder appears outside the file name or
            more than once.
    """

    def __init__(self, template: str | Path, interval: RollingInterval) -> None:
        path = Path(template)
        if BUCKET_PLACEHOLDER in str(path.parent):
            raise ValueError(
                f"{BUCKET_PLACEHOLDER} may only appear in the file name: {template}"
            )
        name = path.name
        if not name:
            raise ValueError(f"Path template has no file name: {template!r}")
        count = name.count(BUCKET_PLACEHOLDER)
        if count > 1:
            raise ValueError(f"{BUCKET_PLACEHOLDER} appears more than once: {template}")
        if count == 1:
            prefix, suffix = name.split(BUCKET_PLACEHOLDER)
        else:
            suffix = path.suffix
            prefix = name[: len(name) - len(suffix)] if suffix else name
        self.directory = path.parent
        self.interval = interval
        self._prefix = prefix
        self._suffix = suffix
        self._pattern = re.compile(
            re.escape(prefix) + rf"(\d{{{interval.stamp_length}}})" + re.escape(suffix)
        )

    def path_for(self, bucket: datetime | None) -> Path:
        """Return the file path of a bucket (None for INFINITE)."""
        stamp = "" if bucket is None else bucket.strftime(self.interval.value)
        return self.directory / f"{self._prefix}{stamp}{self._suffix}"

    def parse(self, filename: str) -> datetime | None:
        """Recover the bucket start from a file name, or None if it is not ours."""
        if self.interval is RollingInterval.INFINITE:
            return None
        match = self._pattern.fullmatch(filename)
        if match is None:
            return None
        try:
            return datetime.strptime(match.group(1), self.interval.value)
        except ValueError:
            return None

    def existing_files(self) -> list[tuple[datetime, Path]]:
        """List this sink's rotated files on disk, oldest bucket first."""
        if not self.directory.is_dir():
            return []
        found = []
        for candidate in self.directory.iterdir():
            bucket = self.parse(candidate.name)
            if bucket is not None and candidate.is_file():
                found.append((bucket, candidate))
        found.sort(key=lambda item: item[0])
        return found
