import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import typer

from .config import AppConfig, ProgramOpts, RunState
from .models import StatEntry
from .summary import Summary

logger = logging.getLogger(__name__)

KIB: int = 1024
MIB: int = 1024 * KIB
GIB: int = 1024 * MIB

SPINNERS: str = "⠲⠴⠦⠖"

# Terminals at most this wide get the condensed status line.
FULL_STATUS_MIN_COLS: int = 97
# Width taken by the status line decoration around the root path.
STATUS_DECORATION: int = 95

CLEAR_SCREEN: str = "\033[2J"
CURSOR_HOME: str = "\033[H"


def humansize(size: int) -> str:
    if size >= GIB:
        return f"{size / GIB:.1f}G"
    if size >= MIB:
        return f"{size / MIB:.1f}M"
    return f"{size / KIB:.1f}K"


def display_root_path(root: str, width: int) -> str:
    """Fit the scan root into the status line, eliding from the left."""
    root_len: int = len(root)
    if width <= FULL_STATUS_MIN_COLS or root_len + STATUS_DECORATION < width:
        return root

    limit: int = width - FULL_STATUS_MIN_COLS + 5
    if root_len < limit:
        return root
    return ".." + root[root_len - limit :]


def format_entry(entry: StatEntry, opts: ProgramOpts, width: int | None = None) -> str:
    if opts.lines:
        display: str = f"{entry.label:>10}: {entry.line_count:>10} lines in {entry.file_count} files"
    else:
        display = f"{entry.label:>10}: {humansize(entry.total_bytes):>10} in {entry.file_count} files"

    if width is None:
        return display
    return display[:width].ljust(width)


def is_displayed(entry: StatEntry, opts: ProgramOpts, min_bytes: int = KIB) -> bool:
    if opts.lines:
        return entry.line_count > 0
    return entry.total_bytes > min_bytes


def select_entries(summary: Summary, opts: ProgramOpts) -> list[StatEntry]:
    """
    Flatten the summary into display order.

    Time mode lists groups in ascending key order with the newest label
    first inside each group. Otherwise entries are ordered by lines or
    bytes, largest first. Ties fall back to the label.
    """
    if opts.time:
        ordered: list[StatEntry] = []
        for key in sorted(summary.groups):
            bucket_entries = summary.groups[key].entries
            ordered.extend(bucket_entries[label] for label in sorted(bucket_entries, reverse=True))
        return ordered

    entries: list[StatEntry] = sorted(summary.entries.values(), key=lambda e: e.label)
    if opts.lines:
        return sorted(entries, key=lambda e: e.line_count, reverse=True)
    return sorted(entries, key=lambda e: e.total_bytes, reverse=True)


def column_width(opts: ProgramOpts, cfg: AppConfig) -> int:
    if opts.time or opts.lines:
        return cfg.wide_column_width
    return cfg.column_width


def column_count(width: int, colwidth: int) -> int:
    ncols: int = width // colwidth
    if ncols * colwidth > width:
        ncols -= 1
    return max(ncols, 1)


def layout_columns(cells: list[str], width: int, rows: int, colwidth: int) -> list[str]:
    """
    Pack cells into `rows` lines, column-major.

    A column is filled top to bottom before moving right. Cells beyond the
    last column that fits in `width` are not shown.
    """
    rows = max(rows, 1)
    ncols: int = column_count(width, colwidth)
    lines: list[str] = ["" for _ in range(rows)]

    for idx, cell in enumerate(cells[: rows * ncols]):
        lines[idx % rows] += f"|{cell}".ljust(colwidth)[:colwidth]

    return lines


def status_line(summary: Summary, width: int, now: datetime) -> str:
    stamp: str = now.strftime("%Y-%m-%d %H:%M:%S")
    scanned: str = humansize(summary.total)

    if width > FULL_STATUS_MIN_COLS:
        min_date: str = summary.min_mtime.strftime("%Y-%m-%d") if summary.min_mtime else "-"
        max_date: str = summary.max_mtime.strftime("%Y-%m-%d") if summary.max_mtime else "-"
        line: str = (
            f"{stamp} {summary.root_display} min-mtime {min_date} max-mtime {max_date} "
            f"scanned:{scanned} errs:{summary.exception_count}"
        )
    else:
        line = f"{stamp} {summary.root_display} scanned:{scanned} errs:{summary.exception_count}"

    return line[:width]


@dataclass(frozen=True, slots=True)
class Frame:
    status: str
    spinner: str
    rows: list[str]


class Renderer:
    def __init__(self, opts: ProgramOpts, cfg: AppConfig, state: RunState) -> None:
        self.opts: ProgramOpts = opts
        self.cfg: AppConfig = cfg
        self.state: RunState = state

    def next_spinner(self) -> str:
        glyph: str = SPINNERS[self.state.tick % len(SPINNERS)]
        self.state.tick += 1
        return glyph

    def render(self, summary: Summary, width: int, rows: int, now: datetime | None = None) -> Frame:
        colwidth: int = column_width(self.opts, self.cfg)
        selected: list[StatEntry] = select_entries(summary, self.opts)

        cells: list[str] = []
        for entry in selected:
            if not is_displayed(entry, self.opts, self.cfg.display_min_bytes):
                continue
            entry.display = format_entry(entry, self.opts, colwidth - 2)
            cells.append(entry.display)

        if self.opts.debug:
            logger.debug(
                "entries=%d shown=%d files=%d total=%d", len(selected), len(cells), summary.file_count, summary.total
            )

        return Frame(
            status=status_line(summary, width, now if now is not None else datetime.now()),
            spinner=self.next_spinner(),
            rows=layout_columns(cells, width, rows, colwidth),
        )

    def show(self, frame: Frame, echo: Callable[[str], object] = typer.echo) -> None:
        if not self.opts.debug:
            prefix: str = CURSOR_HOME if self.state.screen_cleared else CLEAR_SCREEN + CURSOR_HOME
            self.state.screen_cleared = True
            echo(prefix + frame.status)
        else:
            echo(frame.status)
        echo(frame.spinner)
        for row in frame.rows:
            echo(row)


def write_log(summary: Summary, opts: ProgramOpts, cfg: AppConfig) -> Path:
    """Overwrite the log file with one line per displayed entry, in render order."""
    with cfg.log_path.open("w", encoding="utf-8") as f:
        for entry in select_entries(summary, opts):
            if is_displayed(entry, opts, cfg.display_min_bytes):
                _ = f.write(format_entry(entry, opts) + "\n")
    return cfg.log_path
