from pathlib import Path

import pytest

from calamares_startup.errors import SettingsError
from calamares_startup.lib.env import LocatorConfig
from calamares_startup.settings import ModuleAction, SequenceStep, expand_search_path, load_settings


def _write(tmp_path: Path, text: str) -> Path:
    p = tmp_path / "settings.conf"
    p.write_text(text, encoding="utf-8")
    return p


def test_load_settings_reads_sequence_and_branding(tmp_path):
    p = _write(
        tmp_path,
        "modules-search: [ /opt/modules ]\n"
        "sequence:\n  - show: [welcome]\n  - exec: [unpackfs, umount]\n"
        "branding: '  minimal  '\n"
        "dont-chroot: true\n",
    )
    s = load_settings(p, LocatorConfig())

    assert s.modules_sequence() == [
        SequenceStep(ModuleAction.SHOW, ("welcome",)),
        SequenceStep(ModuleAction.EXEC, ("unpackfs", "umount")),
    ]
    assert s.modules_search_paths() == ["/opt/modules"]
    assert s.branding_component_name() == "minimal"
    assert s.do_chroot() is False


def test_missing_sequence_is_empty_not_an_error(tmp_path):
    s = load_settings(_write(tmp_path, "branding: x\n"), LocatorConfig())
    assert s.modules_sequence() == []
    assert s.do_chroot() is True


def test_local_search_path_expands_per_mode():
    cfg = LocatorConfig(
        build_mode=True,
        extra_data_dirs=(Path("/xdg/calamares"),),
        default_app_data_dir=Path("/usr/share/calamares"),
        working_dir=Path("/work"),
    )
    assert expand_search_path("local", cfg) == [
        "/work/src/modules",
        "/xdg/calamares/modules",
        "/usr/share/calamares/modules",
    ]
    assert expand_search_path("/custom", cfg) == ["/custom"]

    overridden = LocatorConfig(override_dir=Path("/opt/o"), build_mode=True)
    assert expand_search_path("local", overridden) == ["/opt/o/modules"]


@pytest.mark.parametrize(
    "text",
    [
        "modules-search: []\nsequence:\n  - show: [a]\n",
        "modules-search: local\n",
        "sequence: [ welcome ]\n",
        "sequence:\n  - install: [a]\n",
        "sequence:\n  - show: a\n",
        "branding: [ a ]\n",
        "instances:\n  - id: x\n",
        "- just\n- a list\n",
        "sequence: [ unclosed\n",
    ],
)
def test_invalid_settings_are_rejected(tmp_path, text):
    with pytest.raises(SettingsError):
        load_settings(_write(tmp_path, text), LocatorConfig())


def test_custom_instances_are_exposed(tmp_path):
    p = _write(
        tmp_path,
        "instances:\n  - id: root\n    module: users\n    config: users-root.conf\n"
        "sequence:\n  - show: [users@root]\n",
    )
    s = load_settings(p, LocatorConfig())
    assert s.custom_module_instances() == [{"id": "root", "module": "users", "config": "users-root.conf"}]
