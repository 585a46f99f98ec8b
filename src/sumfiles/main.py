from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import Annotated

import typer

from .config import CONFIG_FILENAME, AppConfig, ProgramOpts, RunState
from .errors import TooManyErrorsError
from .log import setup_logging
from .scan import summarize_files


def package_version() -> str:
    try:
        return version(distribution_name="sumfiles")
    except PackageNotFoundError:
        return "unknown (package not installed)"


app: typer.Typer = typer.Typer(
    help=f"sf: summarize the size of groups of files\n\nVersion: {package_version()}",
    add_completion=False,
)


def print_version(is_version: bool) -> None:
    """
    Callback for the --version / -V option.

    Prints the installed version and terminates early with `typer.Exit()`
    when the flag is given; otherwise returns so the scan can run.
    """
    if not is_version:
        return

    typer.echo(package_version())
    raise typer.Exit()


def load_config(path: Path | None) -> AppConfig:
    try:
        if path is not None:
            return AppConfig.load(path)
        return AppConfig.load_or_default(CONFIG_FILENAME)
    except (FileNotFoundError, TypeError, ValueError) as e:
        typer.echo(f"Invalid configuration: {e}", err=True)
        raise typer.Exit(code=2)


@app.command()
def summarize(
    ctx: typer.Context,
    root: Annotated[Path | None, typer.Argument(help="Directory to summarize")] = None,
    log: Annotated[bool, typer.Option("--log", "-l", help="Write the summary to file_summary.txt when finished.")] = False,
    ext: Annotated[bool, typer.Option("--ext", "-e", help="Summarize files by extension (default).")] = False,
    by_time: Annotated[bool, typer.Option("--time", "-t", help="Summarize files by date modified.")] = False,
    lines: Annotated[bool, typer.Option("--lines", "-L", help="Summarize text files by their line count.")] = False,
    debug: Annotated[bool, typer.Option("--debug", "-v", help="Verbose diagnostics, no screen clearing.")] = False,
    config: Annotated[Path | None, typer.Option("--config", "-c", help="YAML config file.")] = None,
    save_config: Annotated[bool, typer.Option("--save-config", help="Write the effective config and exit.")] = False,
    _version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=print_version,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Summarize files below ROOT by extension or modification date."""
    _ = setup_logging(debug)
    cfg: AppConfig = load_config(config)

    if save_config:
        target: Path = config if config is not None else CONFIG_FILENAME
        cfg.save(target)
        typer.echo(f"Config written to {target}")
        raise typer.Exit()

    if root is None:
        typer.echo("sf requires a directory to examine!")
        typer.echo(ctx.get_help())
        raise typer.Exit(code=1)

    opts: ProgramOpts = ProgramOpts(log=log, ext=ext, time=by_time, lines=lines, debug=debug)
    state: RunState = RunState()

    typer.echo("Summarizing Files now...")
    try:
        _ = summarize_files(root, opts, cfg, state)
    except TooManyErrorsError as e:
        typer.echo(f"Aborting: {e}", err=True)
        raise typer.Exit(code=2)


if __name__ == "__main__":
    app()
