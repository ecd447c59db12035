"""Candidate lists for the three startup resources.

Each builder returns candidates in priority order. An application-data
override short-circuits everything else; otherwise the tiers are build tree,
extra dirs, the install-time sysconf dir (settings and branding only) and
finally the standard data dir.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from .errors import FatalStartupError
from .lib.candidates import DEFAULT_PROBE, Candidate, FileProbe, Tier, resolve
from .lib.env import LocatorConfig

logger = logging.getLogger(__name__)


QML_DIR = "qml"
SETTINGS_FILE = "settings.conf"


def branding_subpath(component_name: str) -> str:
    return f"branding/{component_name}/branding.desc"


def qml_dir_candidates(cfg: LocatorConfig) -> List[Candidate]:
    if cfg.is_overridden:
        return [Candidate(Tier.OVERRIDE, cfg.app_data_dir / QML_DIR)]

    out: List[Candidate] = []
    if cfg.build_mode:
        out.append(Candidate(Tier.BUILD, cfg.working_dir / "src" / QML_DIR))
    out.extend(Candidate(Tier.EXTRA, d / QML_DIR) for d in cfg.extra_data_dirs)
    out.append(Candidate(Tier.FALLBACK, cfg.app_data_dir / QML_DIR))
    return out


def settings_file_candidates(cfg: LocatorConfig) -> List[Candidate]:
    if cfg.is_overridden:
        return [Candidate(Tier.OVERRIDE, cfg.app_data_dir / SETTINGS_FILE)]

    out: List[Candidate] = []
    if cfg.build_mode:
        out.append(Candidate(Tier.BUILD, cfg.working_dir / SETTINGS_FILE))
    out.extend(Candidate(Tier.EXTRA, d / SETTINGS_FILE) for d in cfg.extra_config_dirs)
    out.append(Candidate(Tier.SYSTEM, cfg.sysconf_dir / SETTINGS_FILE))
    out.append(Candidate(Tier.FALLBACK, cfg.app_data_dir / SETTINGS_FILE))
    return out


def branding_file_candidates(cfg: LocatorConfig, component_name: str) -> List[Candidate]:
    rel = branding_subpath(component_name)
    if cfg.is_overridden:
        return [Candidate(Tier.OVERRIDE, cfg.app_data_dir / rel)]

    out: List[Candidate] = []
    if cfg.build_mode:
        out.append(Candidate(Tier.BUILD, cfg.working_dir / "src" / rel))
    out.extend(Candidate(Tier.EXTRA, d / rel) for d in cfg.extra_data_dirs)
    out.append(Candidate(Tier.SYSTEM, cfg.sysconf_dir / rel))
    out.append(Candidate(Tier.FALLBACK, cfg.app_data_dir / rel))
    return out


def locate_qml_dir(cfg: LocatorConfig, probe: FileProbe = DEFAULT_PROBE) -> Path:
    candidates = qml_dir_candidates(cfg)
    found = resolve(candidates, probe)
    if found is None:
        raise FatalStartupError(
            "Cowardly refusing to continue startup without a QML directory.",
            candidates=candidates,
            detail=(
                "explicitly configured application data directory is missing qml/"
                if cfg.is_overridden
                else "none of the expected QML paths exist."
            ),
        )
    logger.info("Using QML directory %s", found.path)
    return found.path


def locate_settings_file(cfg: LocatorConfig, probe: FileProbe = DEFAULT_PROBE) -> Path:
    candidates = settings_file_candidates(cfg)
    found = resolve(candidates, probe)
    if found is None:
        raise FatalStartupError(
            "Cowardly refusing to continue startup without settings.",
            candidates=candidates,
            detail=(
                "explicitly configured application data directory is missing settings.conf"
                if cfg.is_overridden
                else "none of the expected configuration file paths exist."
            ),
        )
    logger.info("Using settings file %s", found.path)
    return found.path


def locate_branding_file(
    cfg: LocatorConfig, component_name: str, probe: FileProbe = DEFAULT_PROBE
) -> Path:
    name = component_name.strip()
    if not name:
        raise FatalStartupError("branding component not set in settings.conf")

    candidates = branding_file_candidates(cfg, name)
    found = resolve(candidates, probe)
    if found is None:
        raise FatalStartupError(
            "Cowardly refusing to continue startup without branding.",
            candidates=candidates,
            detail=(
                f"explicitly configured application data directory is missing {name}"
                if cfg.is_overridden
                else "none of the expected branding descriptor file paths exist."
            ),
        )
    logger.info("Using branding descriptor %s", found.path)
    return found.path
