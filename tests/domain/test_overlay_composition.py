"""Tests for overlay composition."""

import pytest

from shellenv.domain.entities.overlay import OverlayAction, OverlayRule
from shellenv.domain.entities.package import Package, PackageOverride
from shellenv.domain.entities.package_set import PackageSet
from shellenv.domain.errors import MissingAttributeError, OverlayError
from shellenv.domain.services.overlay_composition import (
    Overlay,
    apply_overlay,
    compose_overlays,
    rules_overlay,
)


def _base():
    versions = {"hello": "2.12", "figlet": "2.2.5"}
    return PackageSet(
        lookup=lambda n: Package.from_attribute(n, versions[n]) if n in versions else None
    )


def _set_version(label, version):
    return rules_overlay(
        label,
        [OverlayRule("hello", OverlayAction.OVERRIDE, override=PackageOverride(version=version))],
    )


class TestComposeOverlays:
    def test_no_overlays_is_identity(self):
        base = _base()
        assert compose_overlays(base, []) is base

    def test_later_overlay_wins(self):
        a = _set_version("a", "1")
        b = _set_version("b", "2")
        assert compose_overlays(_base(), [a, b])["hello"].version == "2"
        assert compose_overlays(_base(), [b, a])["hello"].version == "1"

    def test_later_overlay_sees_earlier_result(self):
        define = rules_overlay(
            "define",
            [OverlayRule(
                "tool", OverlayAction.DEFINE,
                package=Package(name="tool", version="0.1", install_phase="true"),
            )],
        )
        bump = rules_overlay(
            "bump",
            [OverlayRule("tool", OverlayAction.OVERRIDE, override=PackageOverride(version="0.2"))],
        )
        result = compose_overlays(_base(), [define, bump])
        assert result["tool"].version == "0.2"
        assert result["tool"].is_local

    def test_override_before_definition_fails(self):
        bump = rules_overlay(
            "bump",
            [OverlayRule("tool", OverlayAction.OVERRIDE, override=PackageOverride(version="0.2"))],
        )
        with pytest.raises(MissingAttributeError) as exc:
            compose_overlays(_base(), [bump])
        assert exc.value.name == "tool"
        assert exc.value.overlay == "bump"
        assert "bump" in str(exc.value)

    def test_alias(self):
        alias = rules_overlay(
            "alias", [OverlayRule("banner", OverlayAction.ALIAS, target="figlet")]
        )
        result = compose_overlays(_base(), [alias])
        assert result["banner"] == result["figlet"]
        assert result["banner"].name == "figlet"

    def test_definition_keeps_pname(self):
        define = rules_overlay(
            "define",
            [OverlayRule(
                "foo", OverlayAction.DEFINE,
                package=Package(name="bar", version="1.0", install_phase="true"),
            )],
        )
        result = compose_overlays(PackageSet(), [define])
        assert result["foo"].name == "bar"
        assert "bar" not in result

    def test_python_overlay_callable(self):
        def pin_hello(prev):
            return {"hello": prev["hello"].apply(PackageOverride(version="9"))}

        result = compose_overlays(_base(), [Overlay("pin", pin_hello)])
        assert result["hello"].version == "9"
        assert result["hello"].overridden == ("version",)


class TestApplyOverlay:
    def test_non_mapping_result_rejected(self):
        with pytest.raises(OverlayError, match="expected a mapping"):
            apply_overlay(_base(), Overlay("bad", lambda prev: ["hello"]))

    def test_non_package_value_rejected(self):
        with pytest.raises(OverlayError, match="expected a Package"):
            apply_overlay(_base(), Overlay("bad", lambda prev: {"hello": "2.12"}))

    def test_rules_read_prev_not_siblings(self):
        overlay = rules_overlay(
            "pair",
            [
                OverlayRule(
                    "tool", OverlayAction.DEFINE,
                    package=Package(name="tool", install_phase="true"),
                ),
                OverlayRule("tool2", OverlayAction.ALIAS, target="tool"),
            ],
        )
        with pytest.raises(MissingAttributeError):
            apply_overlay(_base(), overlay)
