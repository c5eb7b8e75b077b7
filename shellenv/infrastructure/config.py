"""
Configuration Module

Architectural Intent:
- Centralized configuration loading from a JSON file
- Provides typed access to all shellenv settings
- Falls back to sensible defaults when config file is absent
- Environment variables override file-based config

Design Decisions:
- Config is a frozen dataclass for immutability after load
- Nested config sections map to sub-dataclasses
- A broken config file degrades to defaults with a warning; a broken
  descriptor never does (see descriptor_parser)
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Mapping, Optional
import json
import logging
import os

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "shellenv.json"


@dataclass(frozen=True)
class NixConfig:
    """Package manager invocation."""
    nixpkgs: str = "<nixpkgs>"
    nix_build: str = "nix-build"
    nix_instantiate: str = "nix-instantiate"
    build_timeout: int = 0


@dataclass(frozen=True)
class CatalogConfig:
    """Where base package lookups are answered."""
    backend: str = "nix"  # "nix" or "static"
    index_path: str = ""


@dataclass(frozen=True)
class OverlaysConfig:
    """User overlays applied before a descriptor's own overlays."""
    directory: str = "~/.config/shellenv/overlays"
    enabled: bool = True


@dataclass(frozen=True)
class ShellConfig:
    """Activation shell settings."""
    executable: str = "bash"
    descriptor: str = "shell.json"
    rc_dir: str = ""


@dataclass(frozen=True)
class SessionConfig:
    """Persistent tmux session settings."""
    prefix: str = "shellenv"


@dataclass(frozen=True)
class TelemetryConfig:
    """OpenTelemetry configuration."""
    endpoint: str = ""
    insecure: bool = False


@dataclass(frozen=True)
class ShellenvConfig:
    """Root configuration for shellenv."""
    nix: NixConfig = field(default_factory=NixConfig)
    catalog: CatalogConfig = field(default_factory=CatalogConfig)
    overlays: OverlaysConfig = field(default_factory=OverlaysConfig)
    shell: ShellConfig = field(default_factory=ShellConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    telemetry: TelemetryConfig = field(default_factory=TelemetryConfig)
    log_level: str = "WARNING"


def _env_override(
    data: dict, prefix: str = "SHELLENV", environ: Optional[Mapping[str, str]] = None
) -> dict:
    """Override config values with environment variables.

    Environment variables follow the pattern SHELLENV_SECTION_KEY.
    For example: SHELLENV_NIX_NIXPKGS=/src/nixpkgs, SHELLENV_SHELL_EXECUTABLE=zsh
    """
    environ = os.environ if environ is None else environ
    for key, value in environ.items():
        if not key.startswith(f"{prefix}_"):
            continue
        parts = key[len(prefix) + 1:].lower().split("_", 1)
        if len(parts) == 2:
            section, field_name = parts
            if not isinstance(data.get(section), dict):
                data[section] = {}
            data[section][field_name] = value
        elif len(parts) == 1:
            data[parts[0]] = value
    return data


def _parse_config_file(path: Path) -> dict:
    """Parse a JSON config file. Returns empty dict on failure."""
    try:
        with open(path) as f:
            data = json.load(f)
    except FileNotFoundError:
        logger.debug("Config file not found: %s", path)
        return {}
    except json.JSONDecodeError as e:
        logger.warning("Invalid config file %s: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s must hold a JSON object", path)
        return {}
    return data


def _build_sub_config(cls, data: dict):
    """Build a sub-config dataclass from a dict, ignoring unknown keys."""
    valid_fields = {f.name: f for f in fields(cls)}
    filtered = {k: v for k, v in data.items() if k in valid_fields}

    # Convert string numbers to int/bool
    for name, value in list(filtered.items()):
        if not isinstance(value, str):
            continue
        kind = valid_fields[name].type
        try:
            if kind == "int":
                filtered[name] = int(value)
            elif kind == "bool":
                filtered[name] = value.lower() in ("true", "1", "yes")
        except ValueError:
            logger.warning("Ignoring %s.%s=%r: not an integer", cls.__name__, name, value)
            del filtered[name]

    return cls(**filtered)


def load_config(
    path: Optional[str] = None,
    env_prefix: str = "SHELLENV",
    environ: Optional[Mapping[str, str]] = None,
) -> ShellenvConfig:
    """Load configuration from file and environment variables.

    Priority (highest to lowest):
    1. Environment variables (SHELLENV_SECTION_KEY)
    2. Config file values
    3. Defaults

    Args:
        path: Path to config file (JSON). Defaults to shellenv.json in CWD.
        env_prefix: Environment variable prefix. Defaults to SHELLENV.
        environ: Variables to read overrides from. Defaults to os.environ.
    """
    config_path = Path(path) if path else Path(DEFAULT_CONFIG_FILE)
    data = _parse_config_file(config_path)
    data = _env_override(data, env_prefix, environ)

    def section(name: str) -> dict:
        value = data.get(name, {})
        return value if isinstance(value, dict) else {}

    log_level = data.get("log_level", "WARNING")
    if isinstance(data.get("log"), dict):
        # SHELLENV_LOG_LEVEL splits into section "log", key "level"
        log_level = data["log"].get("level", log_level)

    return ShellenvConfig(
        nix=_build_sub_config(NixConfig, section("nix")),
        catalog=_build_sub_config(CatalogConfig, section("catalog")),
        overlays=_build_sub_config(OverlaysConfig, section("overlays")),
        shell=_build_sub_config(ShellConfig, section("shell")),
        session=_build_sub_config(SessionConfig, section("session")),
        telemetry=_build_sub_config(TelemetryConfig, section("telemetry")),
        log_level=str(log_level).upper(),
    )
