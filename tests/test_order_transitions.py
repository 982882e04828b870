"""Tests for the order status transition policy"""

import pytest

from app.errors import InvalidTransitionError
from app.models.order import OrderSource, OrderStatus
from app.services.order_status import (
    FREE_TRANSITIONS,
    STRICT_TRANSITIONS,
    allowed_transitions,
    is_transition_allowed,
    transitions_for_source,
    validate_transition,
)


STRICT_EXPECTED = {
    "pending": {"preparing", "cancelled"},
    "preparing": {"ready", "cancelled"},
    "ready": {"delivered", "cancelled"},
    "delivered": set(),
    "cancelled": set(),
}

FREE_EXPECTED = {
    "pending": {"preparing", "ready", "delivered", "cancelled"},
    "preparing": {"ready", "delivered", "cancelled"},
    "ready": {"delivered", "cancelled"},
    "delivered": set(),
    "cancelled": set(),
}


@pytest.mark.parametrize("source", ["qr_table", "public_link", "dashboard"])
@pytest.mark.parametrize("status", list(STRICT_EXPECTED))
def test_strict_sources_follow_sequential_flow(source, status):
    """Customer and dashboard orders move one step at a time"""
    assert set(allowed_transitions(source, status)) == STRICT_EXPECTED[status]


@pytest.mark.parametrize("status", list(FREE_EXPECTED))
def test_counter_orders_move_forward_freely(status):
    """Counter orders may skip intermediate statuses"""
    assert set(allowed_transitions("counter", status)) == FREE_EXPECTED[status]


def test_unknown_source_uses_strict_table():
    assert transitions_for_source("phone") is STRICT_TRANSITIONS
    assert transitions_for_source(None) is STRICT_TRANSITIONS
    assert transitions_for_source(OrderSource.COUNTER) is FREE_TRANSITIONS


def test_enum_values_are_accepted():
    assert is_transition_allowed(OrderSource.QR_TABLE, OrderStatus.PENDING, OrderStatus.PREPARING)
    assert not is_transition_allowed(OrderSource.QR_TABLE, OrderStatus.PENDING, OrderStatus.READY)


def test_no_status_goes_backwards():
    order = ["pending", "preparing", "ready", "delivered"]
    for table in (STRICT_TRANSITIONS, FREE_TRANSITIONS):
        for status, targets in table.items():
            if status == "cancelled":
                continue
            for target in targets:
                if target != "cancelled":
                    assert order.index(target) > order.index(status)


def test_terminal_statuses_are_final():
    for source in ("qr_table", "counter"):
        assert allowed_transitions(source, "delivered") == []
        assert allowed_transitions(source, "cancelled") == []


def test_unknown_current_status_allows_nothing():
    assert allowed_transitions("dashboard", "archived") == []


def test_validate_transition_raises_with_message():
    with pytest.raises(InvalidTransitionError) as exc_info:
        validate_transition("qr_table", "pending", "delivered")

    error = exc_info.value
    assert error.status_code == 400
    assert error.to_dict() == {
        "error": "Transition invalide",
        "message": 'Impossible de passer de "pending" à "delivered"',
    }


def test_validate_transition_passes_for_counter_skip():
    validate_transition("counter", "pending", "delivered")


def test_allowed_transitions_returns_a_copy():
    allowed = allowed_transitions("qr_table", "pending")
    allowed.append("delivered")
    assert "delivered" not in STRICT_TRANSITIONS["pending"]
