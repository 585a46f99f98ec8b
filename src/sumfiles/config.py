from dataclasses import dataclass, fields
from pathlib import Path
from typing import NoReturn, TypedDict, cast

import yaml

from .models import GroupMode


class RawAppConfig(TypedDict, total=False):
    render_interval_ms: int
    max_extension_length: int
    display_min_bytes: int
    column_width: int
    wide_column_width: int
    recent_days: int
    year_days: int
    chunk_size: int
    max_errors: int
    log_path: str


class RawConfigFile(TypedDict):
    config: RawAppConfig


CONFIG_FILENAME: Path = Path("sumfiles.yaml")


def type_error(value: object) -> NoReturn:
    raise TypeError(f"Unexpected value of wrong type: {value!r}")


@dataclass(slots=True)
class AppConfig:
    render_interval_ms: int = 300
    max_extension_length: int = 9
    display_min_bytes: int = 1024
    column_width: int = 35
    wide_column_width: int = 45
    recent_days: int = 30
    year_days: int = 365
    chunk_size: int = 32 * 1024
    max_errors: int = 0
    log_path: Path = Path("file_summary.txt")

    @staticmethod
    def load(path: Path = CONFIG_FILENAME) -> "AppConfig":
        if not path.exists():
            raise FileNotFoundError(f"Missing config file {path}.")

        with path.open("r", encoding="UTF-8") as f:
            raw_loaded_obj: object | None = cast(object, yaml.safe_load(f))

        if not raw_loaded_obj:
            raise ValueError("Config file is empty or invalid YAML.")

        if not isinstance(raw_loaded_obj, dict):
            type_error(raw_loaded_obj)

        raw_dict: dict[str, object] = cast(dict[str, object], raw_loaded_obj)

        cfg_raw: object | None = raw_dict.get("config")
        if not isinstance(cfg_raw, dict):
            type_error(cfg_raw)

        cfg: dict[str, object] = cast(dict[str, object], cfg_raw)
        app_config: AppConfig = AppConfig()

        for fld in fields(AppConfig):
            if fld.name not in cfg:
                continue
            value: object = cfg[fld.name]
            if fld.name == "log_path":
                if not isinstance(value, str):
                    type_error(value)
                app_config.log_path = Path(value)
            else:
                # bool is an int subclass; reject it explicitly
                if not isinstance(value, int) or isinstance(value, bool):
                    type_error(value)
                setattr(app_config, fld.name, value)

        return app_config

    @staticmethod
    def load_or_default(path: Path = CONFIG_FILENAME) -> "AppConfig":
        if not path.exists():
            return AppConfig()
        return AppConfig.load(path)

    def save(self, path: Path = CONFIG_FILENAME) -> None:
        raw: RawConfigFile = {"config": self.to_raw()}
        with path.open("w", encoding="utf-8") as f:
            yaml.safe_dump(raw, f, sort_keys=False)

    def to_raw(self) -> RawAppConfig:
        return {
            "render_interval_ms": self.render_interval_ms,
            "max_extension_length": self.max_extension_length,
            "display_min_bytes": self.display_min_bytes,
            "column_width": self.column_width,
            "wide_column_width": self.wide_column_width,
            "recent_days": self.recent_days,
            "year_days": self.year_days,
            "chunk_size": self.chunk_size,
            "max_errors": self.max_errors,
            "log_path": str(self.log_path),
        }


@dataclass(slots=True)
class ProgramOpts:
    log: bool = False
    ext: bool = False  # compatibility; extension grouping is the default
    time: bool = False
    lines: bool = False
    debug: bool = False
    con_cols: int = 0
    con_rows: int = 0

    @property
    def mode(self) -> GroupMode:
        return GroupMode.TIME if self.time else GroupMode.EXTENSION


@dataclass(slots=True)
class RunState:
    """Mutable per-run state owned by the driver."""

    tick: int = 0
    oracle_initialized: bool = False
    screen_cleared: bool = False
