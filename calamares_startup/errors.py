from __future__ import annotations

from typing import List, Sequence

from .lib.candidates import Candidate


class SettingsError(ValueError):
    pass


class BrandingError(ValueError):
    pass


class ModuleDescriptorError(ValueError):
    pass


class FatalStartupError(Exception):
    """Startup cannot continue; the process must exit with failure.

    Carries the reason plus every candidate that was tried, in priority
    order, so the diagnostic can be logged in one place.
    """

    def __init__(
        self,
        reason: str,
        *,
        candidates: Sequence[Candidate] = (),
        detail: str = "",
    ):
        self.reason = reason
        self.candidates = list(candidates)
        self.detail = detail
        super().__init__(reason if not detail else f"{reason} ({detail})")

    def diagnostic_lines(self) -> List[str]:
        lines = [self.reason]
        lines.extend(f"  tried {c.describe()}" for c in self.candidates)
        if self.detail:
            lines.append(f"FATAL: {self.detail}")
        return lines
