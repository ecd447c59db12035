from __future__ import annotations

from .global_storage import GlobalStorage


class JobQueue:
    """Owns the global storage that branding and modules share.

    Running jobs is the module system's concern; startup only builds the
    queue and hands its storage to branding.
    """

    def __init__(self) -> None:
        self._storage = GlobalStorage()

    def global_storage(self) -> GlobalStorage:
        return self._storage
