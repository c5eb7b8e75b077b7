"""Tests for OverlayLoader."""

import json

import pytest

from shellenv.domain.entities.overlay import OverlayRef, OverlayRefKind
from shellenv.domain.entities.package import Package
from shellenv.domain.entities.package_set import PackageSet
from shellenv.domain.errors import OverlayError
from shellenv.domain.services.overlay_composition import compose_overlays
from shellenv.infrastructure.overlay_loader import OverlayLoader


def _base():
    return PackageSet(lookup=lambda n: Package.from_attribute(n, "1.0") if n == "figlet" else None)


def _write(path, data):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data))
    return path


class TestOverlayLoader:
    def test_file(self, tmp_path):
        _write(tmp_path / "pin.json", {"figlet": {"override": {"version": "2.2.6"}}})
        overlays = OverlayLoader().load(OverlayRef(OverlayRefKind.FILE, "pin.json", tmp_path))
        assert compose_overlays(_base(), overlays)["figlet"].version == "2.2.6"

    def test_directory_loads_in_lexical_order(self, tmp_path):
        _write(tmp_path / "ov" / "20-second.json", {"figlet": {"override": {"version": "2"}}})
        _write(tmp_path / "ov" / "10-first.json", {"figlet": {"override": {"version": "1"}}})
        (tmp_path / "ov" / "README").write_text("ignored")

        overlays = OverlayLoader().load(OverlayRef(OverlayRefKind.DIRECTORY, "ov", tmp_path))

        assert [o.label.rsplit("/", 1)[-1] for o in overlays] == ["10-first.json", "20-second.json"]
        assert compose_overlays(_base(), overlays)["figlet"].version == "2"

    def test_missing_directory(self, tmp_path):
        with pytest.raises(OverlayError, match="not found"):
            OverlayLoader().load(OverlayRef(OverlayRefKind.DIRECTORY, "nope", tmp_path))

    def test_missing_file(self, tmp_path):
        with pytest.raises(OverlayError, match="not found"):
            OverlayLoader().load(OverlayRef(OverlayRefKind.FILE, "nope.json", tmp_path))

    def test_malformed_file(self, tmp_path):
        (tmp_path / "bad.json").write_text("{")
        with pytest.raises(OverlayError, match="invalid JSON"):
            OverlayLoader().load(OverlayRef(OverlayRefKind.FILE, "bad.json", tmp_path))

    def test_derivation_pname_differs_from_attribute(self, tmp_path):
        _write(
            tmp_path / "foo.json",
            {"foo": {"derivation": {"pname": "bar", "installPhase": "mkdir $out"}}},
        )
        overlays = OverlayLoader().load(OverlayRef(OverlayRefKind.FILE, "foo.json", tmp_path))
        assert compose_overlays(PackageSet(), overlays)["foo"].name == "bar"

    def test_file_not_utf8(self, tmp_path):
        (tmp_path / "bad.json").write_bytes(b"\xff\xfe")
        with pytest.raises(OverlayError, match="not valid UTF-8"):
            OverlayLoader().load(OverlayRef(OverlayRefKind.FILE, "bad.json", tmp_path))

    def test_inline(self, tmp_path):
        ref = OverlayRef(
            OverlayRefKind.INLINE, "overlays[0]", tmp_path, inline={"banner": {"alias": "figlet"}}
        )
        overlays = OverlayLoader().load(ref)
        assert compose_overlays(_base(), overlays)["banner"].attr_path == "figlet"

    def test_python_callable(self, tmp_path, monkeypatch):
        (tmp_path / "shellenv_test_overlay.py").write_text(
            "from shellenv.domain.entities.package import PackageOverride\n"
            "def pin(prev):\n"
            "    return {'figlet': prev['figlet'].apply(PackageOverride(version='9'))}\n"
            "not_callable = 3\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        loader = OverlayLoader()

        overlays = loader.load(OverlayRef(OverlayRefKind.PYTHON, "shellenv_test_overlay:pin"))
        assert compose_overlays(_base(), overlays)["figlet"].version == "9"

        with pytest.raises(OverlayError, match="not a callable"):
            loader.load(OverlayRef(OverlayRefKind.PYTHON, "shellenv_test_overlay:not_callable"))

    def test_python_module_missing(self):
        with pytest.raises(OverlayError, match="cannot import"):
            OverlayLoader().load(OverlayRef(OverlayRefKind.PYTHON, "no_such_module_xyz:fn"))

    def test_user_overlays_come_first(self, tmp_path):
        _write(tmp_path / "user" / "pin.json", {"figlet": {"override": {"version": "user"}}})
        _write(tmp_path / "project.json", {"figlet": {"override": {"version": "project"}}})
        loader = OverlayLoader(str(tmp_path / "user"))

        overlays = loader.load_all([OverlayRef(OverlayRefKind.FILE, "project.json", tmp_path)])

        assert len(overlays) == 2
        assert compose_overlays(_base(), overlays)["figlet"].version == "project"

    def test_user_overlays_skipped(self, tmp_path):
        _write(tmp_path / "user" / "pin.json", {"figlet": {"override": {"version": "user"}}})
        loader = OverlayLoader(str(tmp_path / "user"))
        assert loader.load_all([], include_user=False) == []

    def test_absent_user_directory(self, tmp_path):
        assert OverlayLoader(str(tmp_path / "none")).user_overlays() == []
