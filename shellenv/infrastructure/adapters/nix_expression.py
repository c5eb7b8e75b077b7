"""
Nix Expression Rendering

Architectural Intent:
- Renders Package values as Nix expressions for `nix-build -E` and
  `nix-instantiate --eval -E`
- Local packages become stdenv.mkDerivation calls with a fetchgit src;
  overridden base packages become `<attr>.overrideAttrs (old: { ... })`

Design Decisions:
- All strings go through nix_string(); nothing user-supplied is spliced raw
- Attribute paths are validated against the Nix identifier grammar
"""

from __future__ import annotations

from pathlib import Path
import re

from shellenv.domain.entities.package import GitSource, Package

_ATTR_PATH = re.compile(r"^[A-Za-z_][\w'-]*(\.[A-Za-z_][\w'-]*)*$")

_RECIPE_ATTRS = (
    ("version", "version"),
    ("src", "src"),
    ("phases", "phases"),
    ("build_phase", "buildPhase"),
    ("install_phase", "installPhase"),
)


def is_attr_path(value: str) -> bool:
    return bool(_ATTR_PATH.match(value))


def nix_string(value: str) -> str:
    escaped = (
        value.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("${", "\\${")
        .replace("\n", "\\n")
        .replace("\t", "\\t")
        .replace("\r", "\\r")
    )
    return f'"{escaped}"'


def nix_path(value: str) -> str:
    """An absolute filesystem path as a Nix path value."""
    return f"(/. + {nix_string(value)})"


def nix_list(items) -> str:
    return "[ " + " ".join(items) + (" ]" if items else "]")


def nixpkgs_import(nixpkgs: str) -> str:
    """`<nixpkgs>`, a tarball URL or a checkout path, imported with no arguments."""
    if nixpkgs.startswith("<") and nixpkgs.endswith(">"):
        source = nixpkgs
    elif re.match(r"^https?://", nixpkgs):
        source = f"(fetchTarball {nix_string(nixpkgs)})"
    else:
        source = nix_path(str(Path(nixpkgs).expanduser().resolve()))
    return f"import {source} {{ }}"


def render_source(src: GitSource) -> str:
    hash_attr = "hash" if src.sha256.is_sri else "sha256"
    attrs = [f"url = {nix_string(src.url)};"]
    if src.rev:
        attrs.append(f"rev = {nix_string(src.rev)};")
    attrs.append(f"{hash_attr} = {nix_string(str(src.sha256))};")
    return "fetchgit { " + " ".join(attrs) + " }"


def _recipe_bindings(package: Package, only: tuple[str, ...] | None = None) -> list[str]:
    bindings = []
    for field_name, nix_name in _RECIPE_ATTRS:
        if only is not None and field_name not in only:
            continue
        value = getattr(package, field_name)
        if value is None or value == "" or value == ():
            continue
        if field_name == "src":
            rendered = render_source(value)
        elif field_name == "phases":
            rendered = nix_list([nix_string(p) for p in value])
        else:
            rendered = nix_string(value)
        bindings.append(f"{nix_name} = {rendered};")
    return bindings


def render_package(package: Package, nixpkgs: str = "<nixpkgs>") -> str:
    """Expression evaluating to the derivation for `package`."""
    prelude = f"with {nixpkgs_import(nixpkgs)}; "

    if package.is_local:
        bindings = [f"pname = {nix_string(package.name)};"]
        if not package.version:
            bindings.append('version = "0";')
        bindings.extend(_recipe_bindings(package))
        if package.patches:
            bindings.append(
                f"patches = {nix_list([nix_path(p) for p in package.patches])};"
            )
        return prelude + "stdenv.mkDerivation { " + " ".join(bindings) + " }"

    if not is_attr_path(package.attr_path):
        raise ValueError(f"invalid attribute path: {package.attr_path}")
    if not package.is_overridden:
        return prelude + package.attr_path

    bindings = _recipe_bindings(package, only=package.overridden)
    if "patches" in package.overridden and package.patches:
        bindings.append(
            "patches = (old.patches or [ ]) ++ "
            f"{nix_list([nix_path(p) for p in package.patches])};"
        )
    return (
        prelude
        + f"{package.attr_path}.overrideAttrs (old: {{ "
        + " ".join(bindings)
        + " })"
    )


def render_lookup(attr_path: str, nixpkgs: str = "<nixpkgs>") -> str:
    """Expression evaluating to {version} when the attribute exists, else null."""
    if not is_attr_path(attr_path):
        raise ValueError(f"invalid attribute path: {attr_path}")
    return (
        f"let pkgs = {nixpkgs_import(nixpkgs)}; in "
        f"if pkgs ? {attr_path} "
        f'then {{ version = pkgs.{attr_path}.version or ""; }} '
        "else null"
    )
