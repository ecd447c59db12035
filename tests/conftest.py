import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Tuple

import pytest

# Allow running the suite from a checkout without installing the package.
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from calamares_startup.events import ModuleEvent  # noqa: E402
from calamares_startup.lib.env import LocatorConfig  # noqa: E402


SETTINGS_CONF = """\
modules-search: [ local ]
sequence:
  - show:
      - welcome
  - exec:
      - unpackfs
  - show:
      - finished
branding: minimal
"""

BRANDING_DESC = """\
componentName: minimal
windowExpanding: {expanding}
strings:
    productName: Minimal Linux
    version: 1.0
images:
    productLogo: logo.png
    productIcon: logo.png
    productWelcome: welcome.png
style:
    sidebarBackground: "#292F34"
"""

MODULES = {
    "welcome": "name: welcome\ntype: view\ninterface: qtplugin\n",
    "unpackfs": "name: unpackfs\ntype: job\ninterface: python\n",
    "finished": "name: finished\ntype: view\ninterface: qtplugin\nrequiredModules: [ welcome ]\n",
}


def write_branding(root: Path, name: str = "minimal", expanding: str = "normal") -> Path:
    d = root / "branding" / name
    d.mkdir(parents=True, exist_ok=True)
    (d / "logo.png").write_bytes(b"\x89PNG")
    (d / "welcome.png").write_bytes(b"\x89PNG")
    desc = d / "branding.desc"
    desc.write_text(BRANDING_DESC.format(expanding=expanding).replace("minimal", name), encoding="utf-8")
    return desc


def write_modules(root: Path, modules: Dict[str, str] = MODULES) -> Path:
    mdir = root / "modules"
    for name, desc in modules.items():
        (mdir / name).mkdir(parents=True, exist_ok=True)
        (mdir / name / "module.desc").write_text(desc, encoding="utf-8")
    return mdir


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """A complete application data directory."""
    root = tmp_path / "data"
    (root / "qml").mkdir(parents=True)
    (root / "settings.conf").write_text(SETTINGS_CONF, encoding="utf-8")
    write_branding(root)
    write_modules(root)
    return root


@pytest.fixture
def override_locator(data_dir: Path) -> LocatorConfig:
    return LocatorConfig(override_dir=data_dir, working_dir=data_dir)


class CountingProbe:
    """Filesystem probe stub: answers from sets and records every path asked about."""

    def __init__(self, existing=(), unreadable=()):
        self.existing = {str(p) for p in existing}
        self.unreadable = {str(p) for p in unreadable}
        self.probed: List[str] = []

    def exists(self, path) -> bool:
        self.probed.append(str(path))
        return str(path) in self.existing

    def is_readable(self, path) -> bool:
        return str(path) not in self.unreadable


class FakeModules:
    """Module subsystem stub that records calls and fires events on demand."""

    def __init__(self, journal: List[str]):
        self.journal = journal
        self.handlers: Dict[ModuleEvent, List[Any]] = {}

    def connect(self, event, handler) -> None:
        self.journal.append(f"connect:{event.value}")
        self.handlers.setdefault(event, []).append(handler)

    def init(self) -> None:
        self.journal.append("init")

    def load_modules(self) -> None:
        self.journal.append("load_modules")

    def check_requirements(self) -> List[Tuple[str, str]]:
        self.journal.append("check_requirements")
        return []

    def fire(self, event: ModuleEvent, payload: Any = None) -> None:
        self.journal.append(f"fire:{event.value}")
        for h in list(self.handlers.get(event, [])):
            h(payload)


class FakeWindow:
    def __init__(self, journal: List[str]):
        self.journal = journal
        self.visible = False
        self.maximized = False
        self.progress_model = None
        self.view_manager = None

    def move_to_center(self) -> None:
        self.journal.append("window:center")

    def show(self) -> None:
        self.visible = True
        self.journal.append("window:show")

    def show_maximized(self, *, frameless: bool) -> None:
        self.visible = True
        self.maximized = True
        self.journal.append(f"window:maximized:{frameless}")

    def set_progress_model(self, model) -> None:
        self.progress_model = model
        self.journal.append("window:progress")
