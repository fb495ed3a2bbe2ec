"""Order status transitions and their side effects."""

import pytest

from ordercore.domain.errors import (
    InternalError,
    InvalidArgumentError,
    InvalidTransitionError,
    NotFoundError,
)
from ordercore.domain.status import OrderStatus
from ordercore.services.lifecycle import append_note

S = OrderStatus


def _walk(lifecycle, order_id, *steps):
    order = None
    for step in steps:
        order = lifecycle.transition(order_id, step)
    return order


class TestHappyPath:

    def test_full_lifecycle(self, lifecycle, placed_order):
        confirmed = lifecycle.confirm(placed_order.id)
        assert confirmed.status == S.CONFIRMED
        assert confirmed.confirmed_at is not None
        assert confirmed.completed_at is None

        processing = lifecycle.start_processing(placed_order.id)
        assert processing.status == S.PROCESSING
        ready = lifecycle.mark_ready(placed_order.id)
        assert ready.status == S.READY

        completed = lifecycle.complete(placed_order.id)
        assert completed.status == S.COMPLETED
        assert completed.completed_at is not None
        assert completed.confirmed_at == confirmed.confirmed_at

    def test_one_notification_per_transition(self, lifecycle, placed_order, sink):
        lifecycle.confirm(placed_order.id)
        lifecycle.start_processing(placed_order.id)

        assert len(sink.events) == 2
        first = sink.events[0]
        assert first["title"] == "Order status changed"
        assert first["metadata"]["old_status"] == "PENDING"
        assert first["metadata"]["new_status"] == "CONFIRMED"
        assert placed_order.order_number in first["body"]

    def test_totals_never_change(self, lifecycle, placed_order, catalog):
        catalog.set_price(1, "1.00")
        order = _walk(lifecycle, placed_order.id, S.CONFIRMED, S.PROCESSING, S.READY, S.COMPLETED)
        assert order.total_amount == placed_order.total_amount
        assert order.items == placed_order.items

    def test_string_target_accepted(self, lifecycle, placed_order):
        assert lifecycle.transition(placed_order.id, "CONFIRMED").status == S.CONFIRMED


class TestManagerComments:

    def test_notes_are_appended(self, lifecycle, placed_order):
        lifecycle.confirm(placed_order.id, "Called the customer")
        lifecycle.start_processing(placed_order.id, "   ")
        order = lifecycle.mark_ready(placed_order.id, "Shelf B2")

        assert order.manager_comment == "Called the customer\nShelf B2"

    def test_append_note(self):
        assert append_note(None, "a") == "a"
        assert append_note("a", "b") == "a\nb"


class TestRejectedTransitions:

    def test_confirm_then_complete(self, lifecycle, placed_order):
        lifecycle.confirm(placed_order.id)

        with pytest.raises(InvalidTransitionError) as exc:
            lifecycle.complete(placed_order.id)

        assert (exc.value.source, exc.value.target) == ("CONFIRMED", "COMPLETED")

    def test_completed_cannot_be_cancelled(self, lifecycle, order_service, placed_order, sink):
        done = _walk(lifecycle, placed_order.id, S.CONFIRMED, S.PROCESSING, S.READY, S.COMPLETED)
        sink.events.clear()

        with pytest.raises(InvalidTransitionError):
            lifecycle.cancel(placed_order.id, "changed my mind")

        after = order_service.get_by_id(placed_order.id)
        assert after.status == S.COMPLETED
        assert after.completed_at == done.completed_at
        assert after.manager_comment == done.manager_comment
        assert sink.events == []

    def test_cancelled_is_terminal(self, lifecycle, placed_order):
        lifecycle.cancel(placed_order.id)
        for target in OrderStatus:
            with pytest.raises(InvalidTransitionError):
                lifecycle.transition(placed_order.id, target)

    def test_same_state_is_rejected(self, lifecycle, placed_order, sink):
        with pytest.raises(InvalidTransitionError):
            lifecycle.transition(placed_order.id, S.PENDING)
        assert sink.events == []

    def test_unknown_order(self, lifecycle):
        with pytest.raises(NotFoundError):
            lifecycle.confirm(999)

    def test_unknown_status(self, lifecycle, placed_order):
        with pytest.raises(InvalidArgumentError):
            lifecycle.transition(placed_order.id, "SHIPPED")


class TestCancellation:

    def test_cancel_from_ready(self, lifecycle, placed_order, sink):
        _walk(lifecycle, placed_order.id, S.CONFIRMED, S.PROCESSING, S.READY)
        sink.events.clear()

        order = lifecycle.cancel(placed_order.id, "Customer unreachable")

        assert order.status == S.CANCELLED
        assert order.completed_at is None
        assert order.manager_comment.endswith("CANCELLED: Customer unreachable")

        assert len(sink.events) == 1
        assert sink.events[0]["title"] == "Order cancelled"
        assert sink.events[0]["metadata"]["cancel_reason"] == "Customer unreachable"
        assert "Reason: Customer unreachable" in sink.events[0]["body"]

    @pytest.mark.parametrize("path", [
        (),
        (S.CONFIRMED,),
        (S.CONFIRMED, S.PROCESSING),
    ])
    def test_cancel_from_any_open_state(self, lifecycle, placed_order, path):
        _walk(lifecycle, placed_order.id, *path)
        assert lifecycle.cancel(placed_order.id).status == S.CANCELLED

    def test_cancel_without_reason(self, lifecycle, placed_order, sink):
        order = lifecycle.cancel(placed_order.id)

        assert order.manager_comment == "CANCELLED: no reason given"
        assert sink.events[0]["metadata"]["cancel_reason"] == ""

    def test_cancel_keeps_earlier_notes(self, lifecycle, placed_order):
        lifecycle.confirm(placed_order.id, "ok")
        order = lifecycle.transition(placed_order.id, S.CANCELLED, "out of stock")

        assert order.manager_comment == "ok\nCANCELLED: out of stock"


class TestConcurrency:

    def test_version_conflict_is_retried(self, lifecycle, placed_order, monkeypatch, sink):
        """The retry re-reads the order and re-checks the edge before writing."""
        real_update = lifecycle.repo.update_order_version
        calls = {"n": 0}

        def racing_update(order_id, old_version, new_data):
            calls["n"] += 1
            if calls["n"] == 1:
                return 0
            return real_update(order_id, old_version, new_data)

        monkeypatch.setattr(lifecycle.repo, "update_order_version", racing_update)

        order = lifecycle.confirm(placed_order.id)

        assert calls["n"] == 2
        assert order.status == S.CONFIRMED
        assert len(sink.events) == 1

    def test_persistent_conflict_escalates_without_notification(
        self, lifecycle, order_service, placed_order, monkeypatch, sink
    ):
        monkeypatch.setattr(lifecycle.repo, "update_order_version", lambda *a, **kw: 0)

        with pytest.raises(InternalError):
            lifecycle.confirm(placed_order.id)

        assert order_service.get_by_id(placed_order.id).status == S.PENDING
        assert sink.events == []
