"""Presentation boundary.

A real toolkit window (Qt/GTK) implements `PresentationRoot`. The default
`HeadlessWindow` only records what was asked of it and logs it, which is
enough to drive startup without a display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, Sequence

from .branding import Branding
from .settings import ModuleAction, SequenceStep

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressItem:
    label: str
    action: ModuleAction


class ProgressTreeModel:
    """One row per module instance in the sequence, in execution order."""

    def __init__(self, sequence: Sequence[SequenceStep], branding: Optional[Branding] = None):
        self.title = branding.string("productName") if branding else ""
        self.items: List[ProgressItem] = [
            ProgressItem(label=key, action=step.action)
            for step in sequence
            for key in step.instance_keys
        ]

    def __len__(self) -> int:
        return len(self.items)


class ViewManager:
    def __init__(self, sequence: Sequence[SequenceStep]):
        self.pages = [k for step in sequence if step.action is ModuleAction.SHOW for k in step.instance_keys]


class PresentationRoot(Protocol):
    view_manager: ViewManager

    def move_to_center(self) -> None:
        ...

    def show(self) -> None:
        ...

    def show_maximized(self, *, frameless: bool) -> None:
        ...

    def set_progress_model(self, model: ProgressTreeModel) -> None:
        ...


class HeadlessWindow:
    def __init__(self, branding: Branding, sequence: Sequence[SequenceStep]):
        self.branding = branding
        self.view_manager = ViewManager(sequence)
        self.visible = False
        self.maximized = False
        self.frameless = False
        self.centered = False
        self.progress_model: Optional[ProgressTreeModel] = None

    def move_to_center(self) -> None:
        self.centered = True
        logger.debug("Window centered on the active display")

    def show(self) -> None:
        self.visible = True
        logger.info("Window shown (%d pages)", len(self.view_manager.pages))

    def show_maximized(self, *, frameless: bool) -> None:
        self.frameless = frameless
        self.maximized = True
        self.visible = True
        logger.info("Window shown maximized (frameless=%s)", frameless)

    def set_progress_model(self, model: ProgressTreeModel) -> None:
        self.progress_model = model
