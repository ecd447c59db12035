from __future__ import annotations

from dataclasses import dataclass

DEFAULT_TARGET_ROOT = "/tmp/calamares-root"


@dataclass(frozen=True)
class System:
    """Where exec modules will run their commands.

    Created once the job queue exists; `do_chroot` comes from settings.
    """

    do_chroot: bool
    target_root: str = DEFAULT_TARGET_ROOT

    @property
    def effective_root(self) -> str:
        return self.target_root if self.do_chroot else "/"
