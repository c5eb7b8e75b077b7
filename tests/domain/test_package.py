"""Tests for Package, PackageOverride and GitSource."""

import pytest

from shellenv.domain.entities.package import (
    GitSource,
    Package,
    PackageOverride,
    PackageRef,
)
from shellenv.domain.value_objects.nix_hash import SourceHash

SHA = "1yb4dx67x3qxs2842hxhhlqb0knvz6ib2fmws50aid9mzaxbl0w0"


def _src(rev=None):
    return GitSource(
        url="https://github.com/ludios/nixos-playwright", sha256=SourceHash(SHA), rev=rev
    )


class TestPackage:
    def test_from_attribute(self):
        pkg = Package.from_attribute("figlet", "2.2.5")
        assert pkg.name == "figlet"
        assert pkg.attr_path == "figlet"
        assert not pkg.is_local
        assert not pkg.is_overridden

    def test_nested_attribute_name(self):
        pkg = Package.from_attribute("python3Packages.requests")
        assert pkg.name == "requests"
        assert pkg.attr_path == "python3Packages.requests"

    def test_local_derivation(self):
        pkg = Package(name="nixos-playwright", version="0.0.1", src=_src())
        assert pkg.is_local

    def test_local_derivation_needs_src_or_install_phase(self):
        with pytest.raises(ValueError, match="needs a src"):
            Package(name="empty")

    def test_install_phase_alone_is_enough(self):
        assert Package(name="hello-script", install_phase="mkdir -p $out")

    def test_frozen(self):
        pkg = Package.from_attribute("figlet")
        with pytest.raises(AttributeError):
            pkg.name = "other"


class TestPackageOverride:
    def test_apply_records_changed_fields(self):
        pkg = Package.from_attribute("figlet", "2.2.5")
        patched = pkg.apply(PackageOverride(version="2.2.6", src=_src("abc")))
        assert patched.version == "2.2.6"
        assert patched.src.rev == "abc"
        assert set(patched.overridden) == {"version", "src"}
        assert pkg.version == "2.2.5"

    def test_successive_overrides_accumulate(self):
        pkg = Package.from_attribute("figlet")
        pkg = pkg.apply(PackageOverride(version="1"))
        pkg = pkg.apply(PackageOverride(install_phase="true"))
        assert pkg.overridden == ("version", "install_phase")

    def test_empty_override_is_identity(self):
        pkg = Package.from_attribute("figlet")
        assert pkg.apply(PackageOverride()) is pkg


class TestPackageRef:
    def test_empty_name_rejected(self):
        with pytest.raises(ValueError):
            PackageRef("")

    def test_str(self):
        assert str(PackageRef("figlet")) == "figlet"
