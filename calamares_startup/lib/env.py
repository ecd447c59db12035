from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional, Tuple


@dataclass(frozen=True)
class Paths:
    sysconf_dir: str = "/etc/calamares"
    app_data_dir: str = "/usr/share/calamares"
    log_default: str = "~/.cache/calamares/session.log"


PATHS = Paths()


@dataclass(frozen=True)
class LocatorConfig:
    """Inputs that decide where startup resources are searched for."""

    override_dir: Optional[Path] = None
    build_mode: bool = False
    extra_data_dirs: Tuple[Path, ...] = ()
    extra_config_dirs: Tuple[Path, ...] = ()
    sysconf_dir: Path = Path(PATHS.sysconf_dir)
    default_app_data_dir: Path = Path(PATHS.app_data_dir)
    working_dir: Path = field(default_factory=Path.cwd)

    @property
    def is_overridden(self) -> bool:
        return self.override_dir is not None

    @property
    def app_data_dir(self) -> Path:
        # The override replaces the standard data dir everywhere it is used.
        if self.override_dir is not None:
            return self.override_dir
        return self.default_app_data_dir


def _xdg_dirs(value: Optional[str], default: str) -> Tuple[Path, ...]:
    raw = value if value else default
    return tuple(Path(p) / "calamares" for p in raw.split(":") if p)


def build_locator_config(
    *,
    override_dir: Optional[str] = None,
    build_mode: bool = False,
    use_xdg: bool = False,
    environ: Optional[Mapping[str, str]] = None,
    working_dir: Optional[str] = None,
) -> LocatorConfig:
    env = os.environ if environ is None else environ

    extra_data: Tuple[Path, ...] = ()
    extra_config: Tuple[Path, ...] = ()
    if use_xdg:
        extra_data = _xdg_dirs(env.get("XDG_DATA_DIRS"), "/usr/local/share:/usr/share")
        extra_config = _xdg_dirs(env.get("XDG_CONFIG_DIRS"), "/etc/xdg")

    return LocatorConfig(
        override_dir=Path(override_dir).expanduser().absolute() if override_dir else None,
        build_mode=build_mode,
        extra_data_dirs=extra_data,
        extra_config_dirs=extra_config,
        working_dir=Path(working_dir) if working_dir else Path.cwd(),
    )
