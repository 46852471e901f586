from datetime import datetime, timedelta, timezone

import pytest

from apps.bookings.domain.state_machine import (
    ActorRole,
    BookingStatus,
    allowed_targets,
    ensure_completable,
    ensure_transition,
    is_allowed,
    parse_status,
)
from shared.domain.errors import Forbidden, InvalidTransition, TooEarly

ALL_STATUSES = list(BookingStatus)
EDGES = {
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.PENDING, BookingStatus.DECLINED),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
}


@pytest.mark.parametrize("current", ALL_STATUSES)
@pytest.mark.parametrize("requested", ALL_STATUSES)
def test_only_graph_edges_are_allowed(current, requested):
    assert is_allowed(current, requested) == ((current, requested) in EDGES)


def test_terminal_states_have_no_way_out():
    for status in (BookingStatus.DECLINED, BookingStatus.CANCELLED, BookingStatus.COMPLETED):
        assert allowed_targets(status) == []


def test_pending_cannot_jump_to_completed():
    for role in ActorRole:
        with pytest.raises(InvalidTransition):
            ensure_transition(BookingStatus.PENDING, BookingStatus.COMPLETED, role)


def test_only_provider_confirms_or_declines():
    ensure_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, ActorRole.PROVIDER)
    ensure_transition(BookingStatus.PENDING, BookingStatus.DECLINED, ActorRole.PROVIDER)
    for role in (ActorRole.BOOKER, ActorRole.SYSTEM):
        with pytest.raises(Forbidden):
            ensure_transition(BookingStatus.PENDING, BookingStatus.CONFIRMED, role)
        with pytest.raises(Forbidden):
            ensure_transition(BookingStatus.PENDING, BookingStatus.DECLINED, role)


def test_either_party_cancels_but_system_does_not():
    ensure_transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, ActorRole.BOOKER)
    ensure_transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, ActorRole.PROVIDER)
    with pytest.raises(Forbidden):
        ensure_transition(BookingStatus.CONFIRMED, BookingStatus.CANCELLED, ActorRole.SYSTEM)


def test_anyone_involved_completes():
    for role in ActorRole:
        ensure_transition(BookingStatus.CONFIRMED, BookingStatus.COMPLETED, role)


def test_invalid_edge_is_reported_before_role():
    # A booker asking to confirm an already confirmed booking hits the edge check first.
    with pytest.raises(InvalidTransition):
        ensure_transition(BookingStatus.CONFIRMED, BookingStatus.CONFIRMED, ActorRole.BOOKER)


def test_rejected_transition_lists_reachable_statuses():
    with pytest.raises(InvalidTransition) as excinfo:
        ensure_transition(BookingStatus.PENDING, BookingStatus.COMPLETED, ActorRole.PROVIDER)
    assert excinfo.value.to_dict()["allowed"] == ["CONFIRMED", "DECLINED"]

    with pytest.raises(InvalidTransition) as excinfo:
        ensure_transition(BookingStatus.COMPLETED, BookingStatus.CANCELLED, ActorRole.BOOKER)
    assert excinfo.value.to_dict()["allowed"] == []
    assert "already COMPLETED" in excinfo.value.message


def test_completion_waits_for_end():
    end = datetime(2025, 3, 1, 11, tzinfo=timezone.utc)
    with pytest.raises(TooEarly):
        ensure_completable(end, end - timedelta(seconds=1))
    ensure_completable(end, end)
    ensure_completable(end, end + timedelta(days=1))


def test_parse_status():
    assert parse_status("confirmed") == BookingStatus.CONFIRMED
    assert parse_status(BookingStatus.CANCELLED) == BookingStatus.CANCELLED
    with pytest.raises(InvalidTransition) as excinfo:
        parse_status("ARCHIVED")
    assert excinfo.value.to_dict()["status"] == "ARCHIVED"
