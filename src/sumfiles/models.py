from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class GroupMode(Enum):
    EXTENSION = "ext"
    TIME = "time"


@dataclass(frozen=True, slots=True)
class FileRecord:
    path: str
    size: int
    mtime: datetime
    is_dir: bool = False


@dataclass(frozen=True, slots=True)
class LineCount:
    lines: int
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(slots=True)
class StatEntry:
    """
    Accumulated statistics for every file routed to one label.

    `min_mtime`/`max_mtime` only ever tighten. `display` is a cosmetic
    cache refreshed by the renderer and carries no authoritative data.
    """

    label: str
    min_mtime: datetime
    max_mtime: datetime
    group: str = ""
    total_bytes: int = 0
    line_count: int = 0
    file_count: int = 0
    display: str = ""


@dataclass(slots=True)
class GroupBucket:
    name: str
    entries: dict[str, StatEntry] = field(default_factory=dict)


@dataclass(slots=True)
class FlatGrouping:
    entries: dict[str, StatEntry] = field(default_factory=dict)


@dataclass(slots=True)
class BucketedGrouping:
    groups: dict[str, GroupBucket] = field(default_factory=dict)


Grouping = FlatGrouping | BucketedGrouping
