"""Tests for NixResolver."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from shellenv.domain.entities.package import Package, PackageOverride
from shellenv.domain.errors import (
    ResolutionError,
    ResolverUnavailableError,
    SourceHashMismatchError,
    UnknownPackageError,
)
from shellenv.domain.value_objects.store_path import StorePath
from shellenv.infrastructure.adapters.nix_resolver import NixResolver

FIGLET = "/nix/store/0c2ax9q5qp7w0b1m3abqzvsi4lbmgy2k-figlet-2.2.5"


def _completed(stdout):
    result = MagicMock()
    result.returncode = 0
    result.stdout = stdout
    return result


class TestNixResolver:
    @pytest.mark.asyncio
    async def test_realise_base_package(self):
        resolver = NixResolver()
        with patch("subprocess.run", return_value=_completed(FIGLET + "\n")) as run:
            result = await resolver.realise(Package.from_attribute("figlet"))

        assert result == StorePath(FIGLET)
        assert run.call_args.args[0] == [
            "nix-build", "<nixpkgs>", "-A", "figlet", "--no-out-link"
        ]

    @pytest.mark.asyncio
    async def test_first_output_is_used(self):
        out = FIGLET + "\n/nix/store/11111111111111111111111111111111-figlet-2.2.5-man\n"
        with patch("subprocess.run", return_value=_completed(out)):
            result = await NixResolver().realise(Package.from_attribute("figlet"))
        assert str(result) == FIGLET

    @pytest.mark.asyncio
    async def test_overridden_package_uses_expression(self):
        pkg = Package.from_attribute("figlet").apply(PackageOverride(version="2.2.6"))
        with patch("subprocess.run", return_value=_completed(FIGLET)) as run:
            await NixResolver(nixpkgs="<unstable>").realise(pkg)

        cmd = run.call_args.args[0]
        assert cmd[:3] == ["nix-build", "--no-out-link", "-E"]
        assert "import <unstable>" in cmd[3]

    @pytest.mark.asyncio
    async def test_hash_mismatch(self):
        stderr = (
            "error: hash mismatch in fixed-output derivation '/nix/store/x-source.drv':\n"
            "         specified: sha256-AAAA\n"
            "            got:    sha256-BBBB\n"
        )
        pkg = Package(name="nixos-playwright", install_phase="true")
        with patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "nix-build", stderr=stderr),
        ):
            with pytest.raises(SourceHashMismatchError) as exc:
                await NixResolver().realise(pkg)

        assert exc.value.expected == "sha256-AAAA"
        assert exc.value.actual == "sha256-BBBB"
        assert exc.value.package == "nixos-playwright"

    @pytest.mark.asyncio
    async def test_missing_attribute(self):
        stderr = "error: attribute 'nope' missing\n"
        with patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "nix-build", stderr=stderr),
        ):
            with pytest.raises(UnknownPackageError) as exc:
                await NixResolver().realise(Package.from_attribute("nope"))
        assert exc.value.names == ("nope",)

    @pytest.mark.asyncio
    async def test_build_failure(self):
        stderr = "building...\nerror: builder for '/nix/store/x.drv' failed with exit code 2\n"
        with patch(
            "subprocess.run",
            side_effect=subprocess.CalledProcessError(1, "nix-build", stderr=stderr),
        ):
            with pytest.raises(ResolutionError, match="failed with exit code 2"):
                await NixResolver().realise(Package.from_attribute("figlet"))

    @pytest.mark.asyncio
    async def test_nix_not_installed(self):
        with patch("subprocess.run", side_effect=FileNotFoundError):
            with pytest.raises(ResolverUnavailableError, match="nix-build"):
                await NixResolver().realise(Package.from_attribute("figlet"))

    @pytest.mark.asyncio
    async def test_timeout(self):
        with patch(
            "subprocess.run", side_effect=subprocess.TimeoutExpired("nix-build", 5)
        ):
            with pytest.raises(ResolutionError, match="timed out"):
                await NixResolver(timeout=5).realise(Package.from_attribute("figlet"))

    @pytest.mark.asyncio
    async def test_garbage_output(self):
        with patch("subprocess.run", return_value=_completed("not a path\n")):
            with pytest.raises(ResolutionError):
                await NixResolver().realise(Package.from_attribute("figlet"))

    @pytest.mark.asyncio
    async def test_empty_output(self):
        with patch("subprocess.run", return_value=_completed("")):
            with pytest.raises(ResolutionError, match="no store path"):
                await NixResolver().realise(Package.from_attribute("figlet"))
