"""Tests for the Activation aggregate."""

import pytest

from shellenv.domain.entities.activation import (
    Activation,
    ActivationPlan,
    ActivationStatus,
    ResolvedPackage,
)
from shellenv.domain.entities.descriptor import Descriptor
from shellenv.domain.entities.package import PackageRef
from shellenv.domain.events.activation_events import (
    ActivationCompletedEvent,
    ActivationFailedEvent,
    ActivationStartedEvent,
    PackagesResolvedEvent,
)
from shellenv.domain.value_objects.store_path import StorePath

FIGLET = StorePath("/nix/store/00000000000000000000000000000000-figlet-2.2.5")


def _activation():
    return Activation(Descriptor(name="demo", packages=(PackageRef("figlet"),)))


def _plan():
    return ActivationPlan(
        name="demo",
        artifacts=(ResolvedPackage("figlet", FIGLET),),
        environment={"MESSAGE": "Hello"},
        shell_hook="figlet $MESSAGE",
    )


class TestActivationPlan:
    def test_path_entries(self):
        assert _plan().path_entries == (f"{FIGLET}/bin",)

    def test_environment_is_read_only(self):
        with pytest.raises(TypeError):
            _plan().environment["MESSAGE"] = "x"

    def test_to_dict(self):
        data = _plan().to_dict()
        assert data["packages"] == [{"name": "figlet", "store_path": str(FIGLET)}]
        assert data["environment"] == {"MESSAGE": "Hello"}
        assert data["shell_hook"] == "figlet $MESSAGE"


class TestActivation:
    def test_happy_path_emits_events_in_order(self):
        done = _activation().start_resolution().resolved(_plan()).complete(0)
        assert done.status == ActivationStatus.COMPLETED
        assert done.exit_code == 0
        assert [type(e) for e in done.domain_events] == [
            ActivationStartedEvent,
            PackagesResolvedEvent,
            ActivationCompletedEvent,
        ]

    def test_transitions_return_new_instances(self):
        pending = _activation()
        resolving = pending.start_resolution()
        assert pending.status == ActivationStatus.PENDING
        assert resolving is not pending

    def test_started_event_details(self):
        event = _activation().start_resolution().domain_events[0]
        assert event.environment == "demo"
        assert event.source == "<inline>"
        assert event.package_count == 1

    def test_resolved_event_lists_store_paths(self):
        event = _activation().start_resolution().resolved(_plan()).domain_events[-1]
        assert event.store_paths == (str(FIGLET),)

    def test_nonzero_exit_fails(self):
        failed = _activation().start_resolution().resolved(_plan()).complete(3)
        assert failed.status == ActivationStatus.FAILED
        assert failed.exit_code == 3
        assert isinstance(failed.domain_events[-1], ActivationFailedEvent)
        assert failed.domain_events[-1].exit_code == 3

    def test_fail_keeps_message(self):
        failed = _activation().start_resolution().fail("unknown package(s): nope")
        assert failed.error_message == "unknown package(s): nope"
        assert failed.plan is None
        assert failed.domain_events[-1].exit_code is None

    def test_cannot_start_twice(self):
        with pytest.raises(ValueError, match="PENDING"):
            _activation().start_resolution().start_resolution()

    def test_cannot_complete_without_plan(self):
        with pytest.raises(ValueError, match="RESOLVED"):
            _activation().start_resolution().complete()

    def test_event_to_dict(self):
        event = _activation().start_resolution().domain_events[0]
        data = event.to_dict()
        assert data["event_type"] == "ActivationStartedEvent"
        assert data["aggregate_id"] == "demo"
