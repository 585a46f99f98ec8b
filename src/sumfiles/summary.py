from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from .models import BucketedGrouping, FlatGrouping, GroupBucket, GroupMode, Grouping, StatEntry

_EMPTY: Mapping[str, object] = MappingProxyType({})


def add_or_update(
    entries: dict[str, StatEntry], key: str, size: int, mtime: datetime, *, group: str = ""
) -> StatEntry:
    """
    Add a file to the entry stored under `key`, creating it when missing.

    The entry is mutated in place and returned. Each physical file must be
    passed at most once; a repeated call counts it twice.
    """
    entry: StatEntry | None = entries.get(key)

    if entry is None:
        entry = StatEntry(label=key, group=group, min_mtime=mtime, max_mtime=mtime)
        entries[key] = entry

    entry.total_bytes += size
    entry.file_count += 1
    if mtime > entry.max_mtime:
        entry.max_mtime = mtime
    if mtime < entry.min_mtime:
        entry.min_mtime = mtime

    return entry


def new_grouping(mode: GroupMode) -> Grouping:
    if mode is GroupMode.TIME:
        return BucketedGrouping()
    return FlatGrouping()


@dataclass(slots=True)
class Summary:
    root: str
    grouping: Grouping
    root_display: str = ""
    total: int = 0
    min_mtime: datetime | None = None
    max_mtime: datetime | None = None
    exception_count: int = 0
    file_count: int = 0

    @staticmethod
    def for_mode(root: str, mode: GroupMode) -> "Summary":
        return Summary(root=root, root_display=root, grouping=new_grouping(mode))

    @property
    def mode(self) -> GroupMode:
        if isinstance(self.grouping, BucketedGrouping):
            return GroupMode.TIME
        return GroupMode.EXTENSION

    @property
    def entries(self) -> Mapping[str, StatEntry]:
        if isinstance(self.grouping, FlatGrouping):
            return self.grouping.entries
        return _EMPTY  # type: ignore[return-value]

    @property
    def groups(self) -> Mapping[str, GroupBucket]:
        if isinstance(self.grouping, BucketedGrouping):
            return self.grouping.groups
        return _EMPTY  # type: ignore[return-value]

    def record_file(self, size: int, mtime: datetime) -> None:
        """Update the tree-wide total and extrema. Applies to every file, dropped or not."""
        self.total += size
        self.file_count += 1
        if self.max_mtime is None or mtime > self.max_mtime:
            self.max_mtime = mtime
        if self.min_mtime is None or mtime < self.min_mtime:
            self.min_mtime = mtime

    def add_by_ext(self, ext: str, size: int, mtime: datetime) -> StatEntry:
        if not isinstance(self.grouping, FlatGrouping):
            raise TypeError("Summary is not grouped by extension")
        return add_or_update(self.grouping.entries, ext, size, mtime)

    def add_by_time(self, group: str, label: str, size: int, mtime: datetime) -> StatEntry:
        if not isinstance(self.grouping, BucketedGrouping):
            raise TypeError("Summary is not grouped by time")

        bucket: GroupBucket | None = self.grouping.groups.get(group)
        if bucket is None:
            bucket = GroupBucket(name=group)
            self.grouping.groups[group] = bucket

        return add_or_update(bucket.entries, label, size, mtime, group=group)
