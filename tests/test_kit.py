"""
Tests for the kit builder session
"""

from decimal import Decimal

import pytest

from bakery.cart import LineItemIdentity, add_product
from bakery.errors import ErrorKind, Outcome
from bakery.kit import KitEvent, KitSession, KitStep, advance


@pytest.fixture
def session(store):
    return KitSession(store)


def _to_reviewing(session, *products):
    for product in products:
        session.select_item(product)
    session.next()


class TestAdvance:
    """Tests for the transition table."""

    def test_forward_path(self):
        step, outcome = advance(KitStep.SELECTING, KitEvent.NEXT, has_items=True)
        assert step == KitStep.REVIEWING and outcome.ok

        step, _ = advance(KitStep.REVIEWING, KitEvent.NEXT, has_items=True)
        assert step == KitStep.CONFIRMING

        step, _ = advance(KitStep.CONFIRMING, KitEvent.COMPLETE, has_items=True)
        assert step == KitStep.COMPLETED

    def test_empty_selection(self):
        step, outcome = advance(KitStep.SELECTING, KitEvent.NEXT, has_items=False)

        assert step is None
        assert outcome.error == ErrorKind.EMPTY_SELECTION

    def test_cancel_from_every_open_step(self):
        for open_step in (KitStep.SELECTING, KitStep.REVIEWING, KitStep.CONFIRMING):
            step, _ = advance(open_step, KitEvent.CANCEL, has_items=False)
            assert step == KitStep.CANCELLED

    def test_invalid_moves(self):
        assert advance(KitStep.SELECTING, KitEvent.BACK, True)[0] is None
        assert advance(KitStep.SELECTING, KitEvent.COMPLETE, True)[0] is None
        assert advance(KitStep.CONFIRMING, KitEvent.NEXT, True)[0] is None

    def test_closed_steps_reject_everything(self):
        for closed in (KitStep.COMPLETED, KitStep.CANCELLED):
            for event in KitEvent:
                step, outcome = advance(closed, event, True)
                assert step is None
                assert outcome.error == ErrorKind.INVALID_TRANSITION


class TestSelecting:
    """Tests for the selection step."""

    def test_select_uses_minimum_quantity(self, session, kit_product):
        outcome = session.select_item(kit_product)

        assert outcome.ok
        assert outcome.item.quantity == 2
        assert outcome.item.unit_price == Decimal("28")

    def test_select_without_rules_uses_base_price(self, session, plain_product):
        outcome = session.select_item(plain_product)

        assert outcome.item.quantity == 1
        assert outcome.item.unit_price == Decimal("45.90")

    def test_same_product_twice_gives_two_lines(self, session, kit_product):
        session.select_item(kit_product)
        session.select_item(kit_product)

        assert len(session.items) == 2

    def test_unavailable_product_not_selected(self, session, plain_product, notifier):
        outcome = session.select_item(plain_product.model_copy(update={"is_available": False}))

        assert outcome.error == ErrorKind.PRODUCT_UNAVAILABLE
        assert session.items == []
        assert notifier.errors == ["Carrot cake is not available"]

    def test_next_requires_items(self, session, notifier):
        outcome = session.next()

        assert outcome.error == ErrorKind.EMPTY_SELECTION
        assert session.step == KitStep.SELECTING
        assert notifier.errors == ["select at least one item"]

    def test_back_not_allowed(self, session):
        outcome = session.back()

        assert outcome.error == ErrorKind.INVALID_TRANSITION
        assert session.step == KitStep.SELECTING

    def test_quantity_changes_wait_for_review(self, session, kit_product):
        session.select_item(kit_product)

        outcome = session.change_quantity(0, 3)

        assert outcome.error == ErrorKind.INVALID_TRANSITION
        assert session.items[0].quantity == 2


class TestReviewing:
    """Tests for the review step."""

    def test_change_below_minimum_rejected(self, session, kit_product, notifier):
        _to_reviewing(session, kit_product)

        outcome = session.change_quantity(0, 1)

        assert not outcome.ok
        assert outcome.error == ErrorKind.INVALID_QUANTITY
        assert outcome.message == "minimum quantity is 2 units"
        assert session.items[0].quantity == 2
        assert notifier.errors == ["minimum quantity is 2 units"]

    def test_change_reprices(self, session, kit_product):
        _to_reviewing(session, kit_product)

        outcome = session.change_quantity(0, 6)

        assert outcome.ok
        assert session.items[0].quantity == 6
        assert session.items[0].unit_price == Decimal("25")

    def test_change_zero_rejected_even_without_rules(self, session, plain_product):
        _to_reviewing(session, plain_product)

        outcome = session.change_quantity(0, 0)

        assert outcome.error == ErrorKind.INVALID_QUANTITY
        assert session.items[0].quantity == 1

    def test_change_unit_quantity(self, session, kit_product):
        _to_reviewing(session, kit_product)

        assert not session.change_unit_quantity(0, 0).ok
        assert session.items[0].unit_quantity == 1

        assert session.change_unit_quantity(0, 3).ok
        assert session.items[0].unit_quantity == 3

    def test_unknown_index(self, session, kit_product):
        _to_reviewing(session, kit_product)

        assert session.change_quantity(5, 3).error == ErrorKind.ITEM_NOT_FOUND
        assert session.remove_item(-1).error == ErrorKind.ITEM_NOT_FOUND

    def test_back_keeps_items(self, session, kit_product, plain_product):
        _to_reviewing(session, kit_product, plain_product)

        session.back()

        assert session.step == KitStep.SELECTING
        assert len(session.items) == 2

    def test_emptied_selection_cannot_advance(self, session, kit_product):
        _to_reviewing(session, kit_product)
        session.remove_item(0)

        outcome = session.next()

        assert outcome.error == ErrorKind.EMPTY_SELECTION
        assert session.step == KitStep.REVIEWING


    def test_removed_item_is_a_copy(self, session, kit_product, plain_product):
        _to_reviewing(session, kit_product, plain_product)

        outcome = session.remove_item(0)
        outcome.item.quantity = 99

        assert outcome.ok
        assert outcome.item.product_id == kit_product.id
        assert [item.product_id for item in session.items] == [plain_product.id]
        assert session.total() == Decimal("45.90")


class TestConfirming:
    """Tests for confirmation, completion and cancellation."""

    def test_total(self, session, kit_product, plain_product):
        _to_reviewing(session, kit_product, plain_product)
        session.next()

        # 2 * 28 + 1 * 45.90
        assert session.step == KitStep.CONFIRMING
        assert session.total() == Decimal("101.90")
        assert session.summary()["total"] == 101.9

    def test_complete_moves_items_to_cart(self, session, store, kit_product, plain_product):
        _to_reviewing(session, kit_product, plain_product)
        session.next()

        outcome = session.complete()

        assert outcome.ok
        assert session.step == KitStep.COMPLETED
        assert session.items == []
        assert store.total() == Decimal("101.90")

    def test_complete_merges_with_cart_and_reprices(self, session, store, kit_product):
        add_product(store, kit_product, 3)
        _to_reviewing(session, kit_product)
        session.next()

        session.complete()

        item = store.get(LineItemIdentity(kit_product.id, False))
        assert item.quantity == 5
        assert item.unit_price == Decimal("25")

    def test_duplicate_kit_lines_merge_in_cart(self, session, store, kit_product):
        _to_reviewing(session, kit_product, kit_product)
        session.next()

        session.complete()

        items = store.items()
        assert len(items) == 1
        assert items[0].quantity == 4

    def test_complete_only_from_confirming(self, session, store, kit_product):
        _to_reviewing(session, kit_product)

        outcome = session.complete()

        assert outcome.error == ErrorKind.INVALID_TRANSITION
        assert store.items() == []

    def test_back_to_reviewing(self, session, kit_product):
        _to_reviewing(session, kit_product)
        session.next()

        session.back()

        assert session.step == KitStep.REVIEWING

    def test_cancel_leaves_cart_unchanged(self, session, store, storage, plain_product, kit_product):
        add_product(store, plain_product, 1)
        before = storage.data
        _to_reviewing(session, kit_product)
        session.next()

        outcome = session.cancel()

        assert outcome.ok
        assert session.step == KitStep.CANCELLED
        assert session.items == []
        assert storage.data == before

    def test_closed_session_rejects_operations(self, session, kit_product):
        session.cancel()

        outcome = session.select_item(kit_product)

        assert outcome.error == ErrorKind.INVALID_TRANSITION
        assert outcome.message == "kit session is already cancelled"

    def test_cart_lines_are_copies(self, session, store, kit_product):
        _to_reviewing(session, kit_product)
        session.next()
        session.complete()

        # a new session on the same cart cannot reach committed lines
        other = KitSession(store)
        other.select_item(kit_product)
        other.cancel()

        assert store.get(LineItemIdentity(kit_product.id, False)).quantity == 2

    def test_invalid_merge_keeps_session_open(self, session, store, capped_product, notifier):
        add_product(store, capped_product, 5)
        _to_reviewing(session, capped_product)
        session.next()

        outcome = session.complete()

        assert outcome.error == ErrorKind.INVALID_QUANTITY
        assert outcome.message == "Truffle tray: minimum quantity is 1 units once merged with the cart"
        assert notifier.errors[-1] == outcome.message
        assert session.step == KitStep.CONFIRMING
        assert len(session.items) == 1
        assert store.get(LineItemIdentity(capped_product.id, False)).quantity == 5

    def test_one_invalid_merge_writes_nothing(self, session, store, capped_product, plain_product):
        add_product(store, capped_product, 4)
        _to_reviewing(session, plain_product, capped_product, capped_product)
        session.next()

        outcome = session.complete()

        # 4 + 1 fits the bracket, the second line pushes it to 6
        assert outcome.error == ErrorKind.INVALID_QUANTITY
        assert store.get(LineItemIdentity(plain_product.id, False)) is None
        assert store.get(LineItemIdentity(capped_product.id, False)).quantity == 4
        assert session.step == KitStep.CONFIRMING

    def test_failed_cart_write_keeps_session_open(self, session, store, kit_product, monkeypatch):
        _to_reviewing(session, kit_product)
        session.next()
        monkeypatch.setattr(
            store,
            "add",
            lambda *args, **kwargs: Outcome.failure(ErrorKind.INVALID_QUANTITY, "rejected"),
        )

        outcome = session.complete()

        assert outcome.message == "rejected"
        assert session.step == KitStep.CONFIRMING
        assert len(session.items) == 1
