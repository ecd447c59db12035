from __future__ import annotations

import argparse
import asyncio
import logging
from typing import Optional

from . import __version__
from .bootstrap import (
    Abort,
    BootstrapContext,
    BootstrapSequencer,
    Collaborators,
    default_collaborators,
)
from .events import EventDispatcher
from .lib.env import LocatorConfig, build_locator_config
from .logging_utils import DEFAULT_LOG_PATH, configure_logging

logger = logging.getLogger(__name__)


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


def run(
    locator: LocatorConfig,
    *,
    loop: asyncio.AbstractEventLoop,
    collaborators: Optional[Collaborators] = None,
) -> int:
    """Drive startup to a visible window; return the process exit status."""

    if collaborators is None:
        collaborators = default_collaborators(EventDispatcher(loop))

    visible: asyncio.Future = loop.create_future()

    def on_terminal(ctx: BootstrapContext) -> None:
        if not visible.done():
            visible.set_result(ctx)

    def on_loop_error(_loop: asyncio.AbstractEventLoop, context: dict) -> None:
        # Callback exceptions never reach run_until_complete on their own.
        exc = context.get("exception") or RuntimeError(context.get("message", "event loop error"))
        if not visible.done():
            visible.set_exception(exc)

    loop.set_exception_handler(on_loop_error)

    sequencer = BootstrapSequencer(
        BootstrapContext(locator=locator), collaborators, on_terminal=on_terminal
    )

    outcome = sequencer.start()
    if isinstance(outcome, Abort):
        for line in outcome.diagnostic_lines():
            logger.error("%s", line)
        return EXIT_FAILURE

    try:
        ctx = loop.run_until_complete(visible)
    except Exception:
        logger.exception("Startup failed after module init was requested")
        return EXIT_FAILURE

    if ctx.failed_modules:
        logger.warning("Started with %d failed modules", len(ctx.failed_modules))
    logger.info("STARTUP: complete (stage %s)", sequencer.stage.name)
    return EXIT_SUCCESS


def main(argv: Optional[list[str]] = None) -> int:
    p = argparse.ArgumentParser(prog="calamares-startup")
    p.add_argument("-d", "--debug", action="store_true", help="Verbose output; look for resources in the build tree")
    p.add_argument("-c", "--config", default=None, help="Application data directory override")
    p.add_argument("-X", "--xdg-config", action="store_true", help="Also search $XDG_DATA_DIRS and $XDG_CONFIG_DIRS")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to the session log")
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    args = p.parse_args(argv)

    configure_logging(log_path=args.log, level=logging.DEBUG if args.debug else logging.INFO)
    logger.info("Calamares version: %s", __version__)

    locator = build_locator_config(
        override_dir=args.config,
        build_mode=bool(args.debug),
        use_xdg=bool(args.xdg_config),
    )

    loop = asyncio.new_event_loop()
    try:
        return run(locator, loop=loop)
    finally:
        loop.close()
