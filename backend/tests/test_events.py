"""
Event log tests.

Verifies:
- Event ids are strictly increasing across products
- Only the owner and allow-listed actors may append
- Inactive products reject every append, the owner's included
- Per-product and per-type counts track appends
"""

import pytest

from conftest import HASH_B, event_input, product_input
from provenance.errors import (
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from provenance.services import authorization_service, events_service, ledger_service, products_service


class TestAppendEvent:

    def test_append_stores_event(self, product):
        event_id = events_service.append_event(
            "GOWNER",
            event_input(location="Addis Ababa", note="first pick", metadata={"lot": "7"}),
            timestamp=1_500,
        )

        event = events_service.get_event(event_id)
        assert event.product_id == product.id
        assert event.actor == "GOWNER"
        assert event.timestamp == 1_500
        assert event.event_type == "HARVEST"
        assert event.location == "Addis Ababa"
        assert event.metadata == {"lot": "7"}
        assert products_service.get_product_event_ids(product.id) == [event_id]

    def test_ids_strictly_increase_across_products(self, product):
        products_service.register_product("GOWNER", product_input("TEA-001"))

        ids = [
            events_service.append_event("GOWNER", event_input()),
            events_service.append_event("GOWNER", event_input("TEA-001")),
            events_service.append_event("GOWNER", event_input()),
        ]
        assert ids == sorted(ids)
        assert len(set(ids)) == 3
        assert ids[0] >= 1

    def test_allow_listed_actor_may_append(self, product):
        authorization_service.add_authorized_actor("GOWNER", product.id, "GSHIPPER")
        event_id = events_service.append_event("GSHIPPER", event_input(event_type="SHIPPED"))
        assert events_service.get_event(event_id).actor == "GSHIPPER"

    def test_stranger_rejected(self, product):
        with pytest.raises(UnauthorizedError) as exc:
            events_service.append_event("GSTRANGER", event_input())
        assert exc.value.code == ErrorCode.UNAUTHORIZED
        assert events_service.get_event_count(product.id) == 0

    def test_revoked_actor_rejected(self, product):
        authorization_service.add_authorized_actor("GOWNER", product.id, "GSHIPPER")
        authorization_service.remove_authorized_actor("GOWNER", product.id, "GSHIPPER")
        with pytest.raises(UnauthorizedError):
            events_service.append_event("GSHIPPER", event_input())

    def test_inactive_product_rejects_owner(self, product):
        products_service.set_active("GOWNER", product.id, False)
        with pytest.raises(InvalidStateError) as exc:
            events_service.append_event("GOWNER", event_input())
        assert exc.value.code == ErrorCode.INVALID_STATE

    def test_reactivation_allows_appends_again(self, product):
        events_service.append_event("GOWNER", event_input())
        products_service.set_active("GOWNER", product.id, False)
        products_service.set_active("GOWNER", product.id, True)
        events_service.append_event("GOWNER", event_input(event_type="PROCESSED"))

        assert events_service.get_event_count(product.id) == 2

    def test_unknown_product(self, db_session):
        with pytest.raises(NotFoundError) as exc:
            events_service.append_event("GOWNER", event_input("MISSING"))
        assert exc.value.code == ErrorCode.PRODUCT_NOT_FOUND

    def test_invalid_hash_rejected_before_storage(self, product):
        with pytest.raises(ValidationError) as exc:
            events_service.append_event("GOWNER", event_input(data_hash=b"short"))
        assert exc.value.code == ErrorCode.INVALID_HASH
        assert events_service.get_event_count(product.id) == 0

    def test_failed_append_does_not_consume_id(self, product):
        first = events_service.append_event("GOWNER", event_input())
        with pytest.raises(UnauthorizedError):
            events_service.append_event("GSTRANGER", event_input())
        second = events_service.append_event("GOWNER", event_input())
        assert second == first + 1

    def test_publishes_event_appended(self, product):
        event_id = events_service.append_event("GOWNER", event_input(data_hash=HASH_B))
        note = ledger_service.list_notifications()[-1]
        assert note.topic == ledger_service.EVENT_APPENDED
        assert note.subject == product.id
        assert note.payload["event_id"] == event_id
        assert note.payload["data_hash"] == HASH_B.hex()


class TestEventLookups:

    def test_get_unknown_event(self, db_session):
        with pytest.raises(NotFoundError) as exc:
            events_service.get_event(999)
        assert exc.value.code == ErrorCode.EVENT_NOT_FOUND

    def test_counts_by_type(self, product):
        for event_type in ("HARVEST", "HARVEST", "SHIPPED"):
            events_service.append_event("GOWNER", event_input(event_type=event_type))

        assert events_service.get_event_count(product.id) == 3
        assert events_service.get_event_count_by_type(product.id, "HARVEST") == 2
        assert events_service.get_event_count_by_type(product.id, "SHIPPED") == 1
        assert events_service.get_event_count_by_type(product.id, "RECEIVED") == 0

    def test_counts_for_unknown_product_are_zero(self, db_session):
        assert events_service.get_event_count("MISSING") == 0
        assert events_service.get_event_count_by_type("MISSING", "HARVEST") == 0

    def test_history_survives_deactivation(self, product):
        event_id = events_service.append_event("GOWNER", event_input())
        products_service.set_active("GOWNER", product.id, False)

        assert events_service.get_event(event_id).event_type == "HARVEST"
        assert events_service.get_event_count_by_type(product.id, "HARVEST") == 1
