import logging
import os
import shutil
import stat
import time
from collections.abc import Callable, Iterator
from datetime import datetime
from pathlib import Path

import typer

from .config import AppConfig, ProgramOpts, RunState
from .errors import WalkError
from .ingest import ingest
from .linecount import TextOracle, detect_mime
from .models import FileRecord
from .render import Frame, Renderer, display_root_path, write_log
from .summary import Summary

logger = logging.getLogger(__name__)

# Lines kept free for the status line, the spinner and the prompt.
RESERVED_ROWS: int = 3


def _raise_walk_error(error: OSError) -> None:
    raise WalkError(str(error.filename or ""), error.strerror or str(error)) from error


def walk_files(root: Path) -> Iterator[FileRecord]:
    """
    Yield a record for every regular file below `root`.

    Symlinks are not followed or reported. Files that disappear between
    listing and stat are skipped.

    Raises
    ------
    WalkError
        If `root` is not a directory, or a directory can't be listed.
    """
    if not root.exists():
        raise WalkError(str(root), "does not exist")
    if not root.is_dir():
        raise WalkError(str(root), "is not a directory")

    for dirpath, _, filenames in os.walk(root, onerror=_raise_walk_error):
        for name in filenames:
            path: str = os.path.normpath(os.path.join(dirpath, name))
            try:
                st: os.stat_result = os.lstat(path)
            except FileNotFoundError:
                continue
            except OSError as e:
                raise WalkError(path, e.strerror or str(e)) from e

            if stat.S_ISLNK(st.st_mode):
                logger.debug("Skipping symlink %s", path)
                continue

            yield FileRecord(path=path, size=st.st_size, mtime=datetime.fromtimestamp(st.st_mtime))


def console_size() -> tuple[int, int]:
    """Return (columns, usable rows) of the terminal."""
    size: os.terminal_size = shutil.get_terminal_size(fallback=(80, 24))
    return size.columns, max(size.lines - RESERVED_ROWS, 1)


def summarize_files(
    root: Path,
    opts: ProgramOpts,
    cfg: AppConfig,
    state: RunState,
    *,
    oracle: TextOracle = detect_mime,
    echo: Callable[[str], object] = typer.echo,
    clock: Callable[[], float] = time.monotonic,
) -> Summary:
    """Walk `root`, refreshing the display while files are ingested."""
    if opts.con_cols <= 0 or opts.con_rows <= 0:
        opts.con_cols, opts.con_rows = console_size()
        logger.debug("calculated: rows=%d cols=%d", opts.con_rows, opts.con_cols)

    summary: Summary = Summary.for_mode(str(root), opts.mode)
    summary.root_display = display_root_path(summary.root, opts.con_cols)
    renderer: Renderer = Renderer(opts, cfg, state)

    def show() -> None:
        frame: Frame = renderer.render(summary, opts.con_cols, opts.con_rows)
        renderer.show(frame, echo)

    interval: float = cfg.render_interval_ms / 1000.0
    last_show: float = clock()

    try:
        for record in walk_files(root):
            _ = ingest(summary, opts, cfg, state, record, oracle=oracle)
            if clock() - last_show > interval:
                show()
                last_show = clock()
    except WalkError as e:
        logger.debug("Walk aborted: %s", e)
        echo(str(e))

    show()

    if opts.log:
        log_path: Path = write_log(summary, opts, cfg)
        echo(f"Wrote summary to {log_path}")

    return summary
