from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

from .lib.env import PATHS

DEFAULT_LOG_PATH = PATHS.log_default
FALLBACK_LOG_NAME = "session.log"

SESSION_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _session_log_candidates(requested: str) -> List[str]:
    out = [requested]
    fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
    if fallback != requested:
        out.append(fallback)
    return out


def _open_session_log(path: str) -> logging.Handler:
    Path(os.path.dirname(path) or ".").mkdir(parents=True, exist_ok=True)
    # One file per session: a new run replaces the previous log.
    return logging.FileHandler(path, mode="w", encoding="utf-8")


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> Optional[str]:
    """Configure the session log.

    The session log always records DEBUG, so a failed startup can be read
    back in full; `level` only applies to the console. The requested file is
    tried first, then session.log in the working directory. When neither can
    be opened the session runs with console logging only and None is
    returned.

    Calling it again keeps the first configuration and returns its path.
    """

    root = logging.getLogger()
    if getattr(root, "_calamares_configured", False):
        return getattr(root, "_calamares_log_path", None)

    root.setLevel(logging.DEBUG)
    fmt = logging.Formatter(fmt=SESSION_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z")

    requested = os.path.expanduser(log_path)
    chosen_path: Optional[str] = None
    rejected: List[str] = []
    for candidate in _session_log_candidates(requested):
        try:
            file_handler = _open_session_log(candidate)
        except OSError as e:
            rejected.append(f"{candidate} ({e.strerror or e})")
            continue
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)
        chosen_path = candidate
        break

    if also_console or chosen_path is None:
        console = logging.StreamHandler()
        console.setLevel(level)
        console.setFormatter(fmt)
        root.addHandler(console)

    setattr(root, "_calamares_configured", True)
    setattr(root, "_calamares_log_path", chosen_path)

    log = logging.getLogger(__name__)
    for r in rejected:
        log.warning("Session log not writable: %s", r)
    if chosen_path is None:
        log.warning("No session log file; logging to the console only")
    else:
        log.info("Session log at %s", chosen_path)
    return chosen_path
