from pathlib import Path

from conftest import CountingProbe

from calamares_startup.lib.candidates import Candidate, OsProbe, Tier, resolve


def _cands(*paths):
    return [Candidate(Tier.EXTRA, Path(p)) for p in paths]


def test_resolve_returns_first_existing_and_stops_probing():
    probe = CountingProbe(existing=["/b", "/c"])
    found = resolve(_cands("/a", "/b", "/c", "/d"), probe)

    assert found == Candidate(Tier.EXTRA, Path("/b"))
    assert probe.probed == ["/a", "/b"]


def test_resolve_skips_unreadable_entries():
    probe = CountingProbe(existing=["/a", "/b"], unreadable=["/a"])
    found = resolve(_cands("/a", "/b"), probe)

    assert found is not None and found.path == Path("/b")


def test_resolve_returns_none_when_nothing_matches():
    probe = CountingProbe()
    assert resolve(_cands("/a", "/b"), probe) is None
    assert probe.probed == ["/a", "/b"]


def test_resolve_empty_list():
    assert resolve([], CountingProbe()) is None


def test_os_probe_on_real_files(tmp_path):
    target = tmp_path / "settings.conf"
    target.write_text("x", encoding="utf-8")

    found = resolve(_cands(tmp_path / "missing.conf", target), OsProbe())
    assert found is not None and found.path == target


def test_candidate_describe_names_tier():
    assert Candidate(Tier.SYSTEM, Path("/etc/calamares/settings.conf")).describe() == (
        "[system] /etc/calamares/settings.conf"
    )
