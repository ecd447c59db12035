from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Tuple

from .errors import SettingsError
from .lib.descriptors import load_yaml_mapping
from .lib.env import LocatorConfig

logger = logging.getLogger(__name__)


class ModuleAction(str, enum.Enum):
    SHOW = "show"
    EXEC = "exec"


@dataclass(frozen=True)
class SequenceStep:
    action: ModuleAction
    instance_keys: Tuple[str, ...]


@dataclass(frozen=True)
class Settings:
    """Parsed settings.conf. Built once during startup, never mutated."""

    path: Path
    raw: Dict[str, Any]
    search_paths: Tuple[str, ...]
    sequence: Tuple[SequenceStep, ...]
    debug_mode: bool = False

    def modules_sequence(self) -> List[SequenceStep]:
        return list(self.sequence)

    def modules_search_paths(self) -> List[str]:
        return list(self.search_paths)

    def custom_module_instances(self) -> List[Dict[str, str]]:
        return [dict(i) for i in (self.raw.get("instances") or [])]

    def branding_component_name(self) -> str:
        return str(self.raw.get("branding") or "").strip()

    def do_chroot(self) -> bool:
        return not bool(self.raw.get("dont-chroot", False))


def expand_search_path(entry: str, cfg: LocatorConfig) -> List[str]:
    """Expand the `local` keyword to the standard module directories."""
    if entry != "local":
        return [entry]
    if cfg.is_overridden:
        return [str(cfg.app_data_dir / "modules")]

    out: List[str] = []
    if cfg.build_mode:
        out.append(str(cfg.working_dir / "src" / "modules"))
    out.extend(str(d / "modules") for d in cfg.extra_data_dirs)
    out.append(str(cfg.app_data_dir / "modules"))
    return out


def _parse_sequence(raw: Any) -> Tuple[SequenceStep, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        raise SettingsError("sequence must be a list")

    steps: List[SequenceStep] = []
    for item in raw:
        if not isinstance(item, dict) or len(item) != 1:
            raise SettingsError(f"sequence entry must be a single show/exec mapping, got {item!r}")
        (key, names), = item.items()
        try:
            action = ModuleAction(key)
        except ValueError as e:
            raise SettingsError(f"unknown sequence action {key!r}") from e
        if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
            raise SettingsError(f"sequence '{key}' must list module instance names")
        steps.append(SequenceStep(action=action, instance_keys=tuple(names)))
    return tuple(steps)


def _validate_instances(raw: Any) -> None:
    if raw is None:
        return
    if not isinstance(raw, list):
        raise SettingsError("instances must be a list")
    for inst in raw:
        if not isinstance(inst, dict) or not {"id", "module", "config"} <= set(inst):
            raise SettingsError(f"instance needs id, module and config keys, got {inst!r}")


def load_settings(path: Path, cfg: LocatorConfig, *, debug: bool = False) -> Settings:
    try:
        raw = load_yaml_mapping(path)
    except ValueError as e:
        raise SettingsError(str(e)) from e

    search = raw.get("modules-search", ["local"])
    if not isinstance(search, list) or not all(isinstance(s, str) for s in search):
        raise SettingsError("modules-search must be a list of strings")
    expanded: List[str] = []
    for entry in search:
        expanded.extend(expand_search_path(entry, cfg))
    if not expanded:
        raise SettingsError("modules-search is empty")

    branding = raw.get("branding", "")
    if not isinstance(branding, str):
        raise SettingsError("branding must be a string")

    _validate_instances(raw.get("instances"))
    sequence = _parse_sequence(raw.get("sequence"))

    logger.debug("Settings %s: %d sequence steps, search paths %s", path, len(sequence), expanded)
    return Settings(
        path=path,
        raw=raw,
        search_paths=tuple(expanded),
        sequence=sequence,
        debug_mode=debug,
    )
