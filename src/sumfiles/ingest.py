import logging
from datetime import datetime

from .buckets import classify
from .config import AppConfig, ProgramOpts, RunState
from .errors import TooManyErrorsError
from .linecount import ANOMALY_LOG, TextOracle, detect_mime, init_oracle, maybe_count_lines
from .models import FileRecord, GroupMode, LineCount, StatEntry
from .summary import Summary

logger = logging.getLogger(__name__)


def extension_of(path: str, max_length: int = 9) -> str | None:
    """
    Return the extension used as grouping key, or None for "Other".

    The whole path is split on '.', so a dot in a directory name with an
    extensionless file below it yields a long tail that is usually dropped.
    """
    components: list[str] = path.split(".")
    if len(components) < 2:
        return None

    ext: str = components[-1]
    if len(ext) > max_length:
        return None
    return ext


def ingest(
    summary: Summary,
    opts: ProgramOpts,
    cfg: AppConfig,
    state: RunState,
    record: FileRecord,
    *,
    oracle: TextOracle = detect_mime,
    now: datetime | None = None,
) -> StatEntry | None:
    """
    Route one file into the summary.

    Returns the entry that was updated, or None when the file was dropped
    from the per-group breakdown. The tree-wide total always includes it.

    Raises
    ------
    TooManyErrorsError
        When `cfg.max_errors` is set and the failure count exceeds it.
    """
    summary.record_file(record.size, record.mtime)

    entry: StatEntry | None
    if summary.mode is GroupMode.TIME:
        group, label = classify(
            record.mtime,
            now if now is not None else datetime.now(),
            recent_days=cfg.recent_days,
            year_days=cfg.year_days,
        )
        entry = summary.add_by_time(group, label, record.size, record.mtime)
    else:
        ext: str | None = extension_of(record.path, cfg.max_extension_length)
        if opts.debug:
            logger.debug("%s: extension %s", record.path, ext or "Other")
        if ext is None:
            return None
        entry = summary.add_by_ext(ext, record.size, record.mtime)

    if opts.lines:
        init_oracle(state)
        result: LineCount = maybe_count_lines(
            record.path,
            oracle,
            chunk_size=cfg.chunk_size,
            trace_path=ANOMALY_LOG if opts.debug else None,
        )
        if result.ok:
            entry.line_count += result.lines
        else:
            summary.exception_count += 1
            logger.debug("Line count failed: %s", result.error)
            if cfg.max_errors > 0 and summary.exception_count > cfg.max_errors:
                raise TooManyErrorsError(summary.exception_count, cfg.max_errors)

    logger.debug("%s: %d lines in %d files", entry.label, entry.line_count, entry.file_count)
    return entry
