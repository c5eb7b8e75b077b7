"""Global test configuration.

Shared fixtures for building descriptors and activation plans without
touching Nix, bash or tmux.
"""

import pytest

from shellenv.domain.entities.activation import ActivationPlan, ResolvedPackage
from shellenv.domain.value_objects.store_path import StorePath

FIGLET_PATH = "/nix/store/00000000000000000000000000000000-figlet-2.2.5"


@pytest.fixture
def figlet_plan():
    return ActivationPlan(
        name="env",
        artifacts=(ResolvedPackage("figlet", StorePath(FIGLET_PATH)),),
        environment={"PATH": f"{FIGLET_PATH}/bin:/usr/bin", "MESSAGE": "Hello"},
        shell_hook="figlet $MESSAGE",
    )
