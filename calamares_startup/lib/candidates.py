from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional, Protocol

logger = logging.getLogger(__name__)


class Tier(str, enum.Enum):
    """Where a candidate path came from."""

    OVERRIDE = "override"
    BUILD = "build"
    EXTRA = "extra"
    SYSTEM = "system"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Candidate:
    tier: Tier
    path: Path

    def describe(self) -> str:
        return f"[{self.tier.value}] {self.path}"


class FileProbe(Protocol):
    def exists(self, path: Path) -> bool:
        ...

    def is_readable(self, path: Path) -> bool:
        ...


class OsProbe:
    """Probe the real filesystem."""

    def exists(self, path: Path) -> bool:
        return os.path.exists(path)

    def is_readable(self, path: Path) -> bool:
        return os.access(path, os.R_OK)


DEFAULT_PROBE = OsProbe()


def resolve(candidates: Iterable[Candidate], probe: FileProbe = DEFAULT_PROBE) -> Optional[Candidate]:
    """Return the first candidate that exists and is readable, or None.

    Candidates after the winning one are never probed.
    """

    for c in candidates:
        if probe.exists(c.path) and probe.is_readable(c.path):
            logger.debug("Resolved %s", c.describe())
            return c
        logger.debug("Rejected %s", c.describe())
    return None
