"""
Batch operation tests.

Verifies:
- Batches are all or nothing
- Bounds: empty and oversized batches are rejected up front
- A failing item reports its position
"""

import pytest

from conftest import event_input, product_input
from provenance.errors import (
    AlreadyExistsError,
    BatchError,
    ErrorCode,
    InvalidStateError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from provenance.services import events_service, ledger_service, products_service


# =============================================================================
# PRODUCT BATCHES
# =============================================================================


class TestRegisterBatch:

    def test_registers_in_order(self, db_session):
        inputs = [product_input(f"P-{i}") for i in range(3)]
        products = products_service.register_batch("GOWNER", inputs, timestamp=10)

        assert [p.id for p in products] == ["P-0", "P-1", "P-2"]
        assert all(p.owner == "GOWNER" and p.created_at == 10 for p in products)
        page = products_service.list_products_by_owner("GOWNER")
        assert [p.id for p in page.items] == ["P-0", "P-1", "P-2"]

    def test_empty_batch(self, db_session):
        with pytest.raises(BatchError) as exc:
            products_service.register_batch("GOWNER", [])
        assert exc.value.code == ErrorCode.BATCH_EMPTY

    def test_oversized_batch(self, db_session):
        inputs = [product_input(f"P-{i}") for i in range(6)]
        with pytest.raises(BatchError) as exc:
            products_service.register_batch("GOWNER", inputs)
        assert exc.value.code == ErrorCode.BATCH_TOO_LARGE

    def test_duplicate_within_batch(self, db_session):
        inputs = [product_input("P-1"), product_input("P-2"), product_input("P-1")]
        with pytest.raises(BatchError) as exc:
            products_service.register_batch("GOWNER", inputs)

        assert exc.value.code == ErrorCode.DUPLICATE_IN_BATCH
        assert exc.value.index == 2
        with pytest.raises(NotFoundError):
            products_service.get_product("P-2")

    def test_existing_id_aborts_whole_batch(self, product):
        inputs = [product_input("P-NEW"), product_input(product.id)]
        with pytest.raises(AlreadyExistsError) as exc:
            products_service.register_batch("GOWNER", inputs)

        assert exc.value.index == 1
        assert exc.value.to_dict()["index"] == 1
        with pytest.raises(NotFoundError):
            products_service.get_product("P-NEW")

    def test_invalid_item_reports_position(self, db_session):
        inputs = [product_input("P-1"), product_input("P-2", origin="")]
        with pytest.raises(ValidationError) as exc:
            products_service.register_batch("GOWNER", inputs)

        assert exc.value.code == ErrorCode.INVALID_ORIGIN
        assert exc.value.index == 1
        assert ledger_service.list_notifications() == []


# =============================================================================
# EVENT BATCHES
# =============================================================================


class TestAppendEventsBatch:

    def test_appends_in_input_order(self, product):
        products_service.register_product("GOWNER", product_input("TEA-001"))
        inputs = [
            event_input(event_type="HARVEST"),
            event_input("TEA-001", event_type="PICKED"),
            event_input(event_type="SHIPPED"),
        ]
        ids = events_service.append_events_batch("GOWNER", inputs, timestamp=42)

        assert ids == sorted(ids)
        assert products_service.get_product_event_ids(product.id) == [ids[0], ids[2]]
        assert products_service.get_product_event_ids("TEA-001") == [ids[1]]
        assert all(events_service.get_event(i).timestamp == 42 for i in ids)

    def test_unauthorized_item_aborts_batch(self, product):
        products_service.register_product("GOTHER", product_input("TEA-001"))
        inputs = [event_input(), event_input("TEA-001")]

        with pytest.raises(UnauthorizedError) as exc:
            events_service.append_events_batch("GOWNER", inputs)

        assert exc.value.index == 1
        assert events_service.get_event_count(product.id) == 0

    def test_inactive_product_aborts_batch(self, product):
        products_service.register_product("GOWNER", product_input("TEA-001"))
        products_service.set_active("GOWNER", "TEA-001", False)

        with pytest.raises(InvalidStateError) as exc:
            events_service.append_events_batch("GOWNER", [event_input(), event_input("TEA-001")])
        assert exc.value.index == 1
        assert events_service.get_event_count(product.id) == 0

    def test_invalid_item_aborts_batch(self, product):
        inputs = [event_input(), event_input(event_type="not a symbol")]
        with pytest.raises(ValidationError) as exc:
            events_service.append_events_batch("GOWNER", inputs)

        assert exc.value.code == ErrorCode.INVALID_EVENT_TYPE
        assert exc.value.index == 1
        assert events_service.get_event_count_by_type(product.id, "HARVEST") == 0

    def test_batch_bounds(self, product):
        with pytest.raises(BatchError) as exc:
            events_service.append_events_batch("GOWNER", [])
        assert exc.value.code == ErrorCode.BATCH_EMPTY

        with pytest.raises(BatchError) as exc:
            events_service.append_events_batch("GOWNER", [event_input() for _ in range(6)])
        assert exc.value.code == ErrorCode.BATCH_TOO_LARGE

    def test_same_product_many_times(self, product):
        ids = events_service.append_events_batch("GOWNER", [event_input() for _ in range(5)])
        assert len(ids) == 5
        assert events_service.get_event_count_by_type(product.id, "HARVEST") == 5
