"""Startup sequencing.

Stages run strictly in order:

1. resolve the QML directory
2. load settings
3. load branding
4. start module init (async, resumes on init-done)
5. on init-done: job queue + globals, window, start module loading (async)
6. on modules-loaded: requirements check, show window, progress model
7. on modules-failed: log the failures, plain show

Stages 1-3 either all succeed or the run ends in an `Abort` that carries the
diagnostic. Deciding to exit is left to the caller.
"""

from __future__ import annotations

import enum
import functools
import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol, Tuple, Union

from .branding import Branding, load_branding
from .errors import BrandingError, FatalStartupError, SettingsError
from .events import EventDispatcher, Handler, ModuleEvent
from .job_queue import JobQueue
from .lib.candidates import DEFAULT_PROBE, FileProbe
from .lib.env import LocatorConfig
from .lib.system import System
from .locators import locate_branding_file, locate_qml_dir, locate_settings_file
from .modulesystem import ModuleManager
from .presentation import HeadlessWindow, PresentationRoot, ProgressTreeModel
from .settings import Settings, load_settings

logger = logging.getLogger(__name__)


class ModuleSubsystem(Protocol):
    def connect(self, event: ModuleEvent, handler: Handler) -> None:
        ...

    def init(self) -> None:
        ...

    def load_modules(self) -> None:
        ...

    def check_requirements(self) -> Any:
        ...


class Stage(enum.IntEnum):
    RESOLVE_ASSETS = 1
    LOAD_SETTINGS = 2
    LOAD_BRANDING = 3
    INIT_MODULES = 4
    LOAD_MODULES = 5
    VISIBLE = 6
    DEGRADED = 7
    ABORTED = 8


@dataclass(frozen=True)
class BootstrapContext:
    """Everything startup has built so far; replaced, never mutated."""

    locator: LocatorConfig
    qml_dir: Optional[Path] = None
    settings: Optional[Settings] = None
    branding: Optional[Branding] = None
    modules: Optional[ModuleSubsystem] = None
    job_queue: Optional[JobQueue] = None
    system: Optional[System] = None
    window: Optional[PresentationRoot] = None
    failed_modules: Tuple[str, ...] = ()


@dataclass(frozen=True)
class Proceed:
    context: BootstrapContext


@dataclass(frozen=True)
class Abort:
    error: FatalStartupError

    def diagnostic_lines(self) -> List[str]:
        return self.error.diagnostic_lines()


StartupOutcome = Union[Proceed, Abort]


Continuation = Callable[[BootstrapContext, Any], BootstrapContext]


def require_fields(ctx: BootstrapContext, stage: str, *names: str) -> None:
    missing = [n for n in names if getattr(ctx, n) is None]
    if missing:
        raise RuntimeError(f"Startup stage {stage} needs {', '.join(missing)}, which is not set yet")


def default_system(settings: Settings) -> System:
    return System(do_chroot=settings.do_chroot())


@dataclass(frozen=True)
class Collaborators:
    module_manager: Callable[[Settings], ModuleSubsystem]
    window: Callable[[BootstrapContext], PresentationRoot]
    job_queue: Callable[[], JobQueue] = JobQueue
    system: Callable[[Settings], System] = default_system
    probe: FileProbe = DEFAULT_PROBE


def default_collaborators(dispatcher: EventDispatcher) -> Collaborators:
    def make_modules(settings: Settings) -> ModuleSubsystem:
        return ModuleManager(
            settings.modules_search_paths(),
            settings.modules_sequence(),
            dispatcher,
            custom_instances=settings.custom_module_instances(),
        )

    def make_window(ctx: BootstrapContext) -> PresentationRoot:
        require_fields(ctx, "create window", "branding", "settings")
        return HeadlessWindow(ctx.branding, ctx.settings.modules_sequence())

    return Collaborators(module_manager=make_modules, window=make_window)


def resolve_assets(ctx: BootstrapContext, probe: FileProbe = DEFAULT_PROBE) -> BootstrapContext:
    return replace(ctx, qml_dir=locate_qml_dir(ctx.locator, probe))


def load_settings_stage(ctx: BootstrapContext, probe: FileProbe = DEFAULT_PROBE) -> BootstrapContext:
    path = locate_settings_file(ctx.locator, probe)
    try:
        settings = load_settings(path, ctx.locator, debug=ctx.locator.build_mode)
    except SettingsError as e:
        raise FatalStartupError(
            "Cowardly refusing to continue startup with invalid settings.",
            detail=f"{path}: {e}",
        ) from e

    if len(settings.modules_sequence()) < 1:
        raise FatalStartupError("FATAL: no sequence set.", detail=f"{path} has no module sequence")
    return replace(ctx, settings=settings)


def load_branding_stage(ctx: BootstrapContext, probe: FileProbe = DEFAULT_PROBE) -> BootstrapContext:
    require_fields(ctx, Stage.LOAD_BRANDING.name, "settings")
    path = locate_branding_file(ctx.locator, ctx.settings.branding_component_name(), probe)
    try:
        branding = load_branding(path)
    except BrandingError as e:
        raise FatalStartupError(
            "Cowardly refusing to continue startup with invalid branding.",
            detail=f"{path}: {e}",
        ) from e
    return replace(ctx, branding=branding)


class BootstrapSequencer:
    def __init__(
        self,
        context: BootstrapContext,
        collaborators: Collaborators,
        *,
        on_terminal: Optional[Callable[[BootstrapContext], None]] = None,
    ):
        self._ctx = context
        self._collab = collaborators
        self._on_terminal = on_terminal
        self._continuations: Dict[ModuleEvent, Continuation] = {}
        self.stage = Stage.RESOLVE_ASSETS

    @property
    def context(self) -> BootstrapContext:
        return self._ctx

    def _advance(self, stage: Stage) -> None:
        if stage <= self.stage:
            raise RuntimeError(f"Startup cannot move from {self.stage.name} back to {stage.name}")
        logger.debug("STARTUP: stage %s", stage.name)
        self.stage = stage

    def start(self) -> StartupOutcome:
        """Run the synchronous stages and request module init.

        Returns Abort when a required resource is missing or invalid; in that
        case nothing has been constructed past the failing stage.
        """

        probe = self._collab.probe
        try:
            ctx = resolve_assets(self._ctx, probe)
            self._advance(Stage.LOAD_SETTINGS)
            ctx = load_settings_stage(ctx, probe)
            self._advance(Stage.LOAD_BRANDING)
            ctx = load_branding_stage(ctx, probe)
        except FatalStartupError as e:
            self.stage = Stage.ABORTED
            return Abort(e)

        logger.info("STARTUP: QML path, settings, branding done")
        self._ctx = self._init_modules(ctx)
        return Proceed(self._ctx)

    def _register(self, modules: ModuleSubsystem, event: ModuleEvent, continuation: Continuation) -> None:
        self._continuations[event] = continuation
        modules.connect(event, functools.partial(self._dispatch, event))

    def _dispatch(self, event: ModuleEvent, payload: Any) -> None:
        continuation = self._continuations.pop(event, None)
        if continuation is None:
            logger.warning("STARTUP: ignoring unexpected %s", event.value)
            return
        if event in (ModuleEvent.MODULES_LOADED, ModuleEvent.MODULES_FAILED):
            # Loaded and failed are exclusive outcomes of one request.
            self._continuations.pop(ModuleEvent.MODULES_LOADED, None)
            self._continuations.pop(ModuleEvent.MODULES_FAILED, None)
        self._ctx = continuation(self._ctx, payload)

    def _init_modules(self, ctx: BootstrapContext) -> BootstrapContext:
        require_fields(ctx, Stage.INIT_MODULES.name, "settings")
        self._advance(Stage.INIT_MODULES)
        modules = self._collab.module_manager(ctx.settings)
        self._register(modules, ModuleEvent.INIT_DONE, self._on_init_done)
        modules.init()
        logger.info("STARTUP: module init started")
        return replace(ctx, modules=modules)

    def _on_init_done(self, ctx: BootstrapContext, _payload: Any) -> BootstrapContext:
        require_fields(ctx, "init-done", "settings", "branding", "modules")
        logger.info("STARTUP: all modules init done")

        job_queue = self._collab.job_queue()
        system = self._collab.system(ctx.settings)
        ctx.branding.set_globals(job_queue.global_storage())
        ctx = replace(ctx, job_queue=job_queue, system=system)
        logger.info("STARTUP: job queue done (chroot=%s, root %s)", system.do_chroot, system.effective_root)

        window = self._collab.window(ctx)
        ctx = replace(ctx, window=window)

        self._advance(Stage.LOAD_MODULES)
        self._register(ctx.modules, ModuleEvent.MODULES_LOADED, self._on_modules_loaded)
        self._register(ctx.modules, ModuleEvent.MODULES_FAILED, self._on_modules_failed)
        ctx.modules.load_modules()

        window.move_to_center()
        logger.info("STARTUP: window created; module loading started")
        return ctx

    def _on_modules_loaded(self, ctx: BootstrapContext, _payload: Any) -> BootstrapContext:
        require_fields(ctx, "modules-loaded", "settings", "branding", "modules", "window")
        logger.info("STARTUP: module loading done")

        ctx.modules.check_requirements()
        if ctx.branding.window_maximize():
            ctx.window.show_maximized(frameless=True)
        else:
            ctx.window.show()
        ctx.window.set_progress_model(ProgressTreeModel(ctx.settings.modules_sequence(), ctx.branding))

        self._advance(Stage.VISIBLE)
        logger.info("STARTUP: window visible and progress view populated")
        return self._finish(ctx)

    def _on_modules_failed(self, ctx: BootstrapContext, failed: Any) -> BootstrapContext:
        require_fields(ctx, "modules-failed", "window")
        failed_ids = tuple(failed or ())
        logger.error("STARTUP: failed modules are %s", ", ".join(failed_ids))
        ctx.window.show()

        self._advance(Stage.DEGRADED)
        return self._finish(replace(ctx, failed_modules=failed_ids))

    def _finish(self, ctx: BootstrapContext) -> BootstrapContext:
        if self._on_terminal is not None:
            self._on_terminal(ctx)
        return ctx
