from __future__ import annotations

import pytest

from modules.core.exceptions import ValidationError
from modules.core.validation import apply_filterset, clamp_page, parse_dto
from modules.history.filters import OrderHistoryFilter
from modules.history.models import OrderHistory
from modules.orders.dtos import CreateOrderDTO
from modules.orders.filters import OrderFilter
from modules.orders.models import Order

pytestmark = pytest.mark.unit


class TestParseDto:
    def test_instance_passes_through(self):
        dto = CreateOrderDTO(customer_name="Jane", order_details="cake")
        assert parse_dto(CreateOrderDTO, dto) is dto

    def test_mapping_is_validated(self):
        dto = parse_dto(CreateOrderDTO, {"customer_name": "Jane", "order_details": "cake"})
        assert dto.customer_name == "Jane"

    def test_pydantic_errors_become_domain_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_dto(CreateOrderDTO, {"customer_name": "Jane"})

        assert "order_details" in exc_info.value.details["errors"]
        assert exc_info.value.http_status == 400


class TestClampPage:
    def test_defaults(self):
        assert clamp_page(None, None, 100, 1000) == (100, 0)

    def test_string_values_are_parsed(self):
        assert clamp_page("25", "50", 100, 1000) == (25, 50)

    @pytest.mark.parametrize("limit", [0, -1, 1001])
    def test_limit_out_of_range(self, limit):
        with pytest.raises(ValidationError):
            clamp_page(limit, 0, 100, 1000)

    def test_negative_offset(self):
        with pytest.raises(ValidationError):
            clamp_page(10, -5, 100, 1000)

    def test_non_integer(self):
        with pytest.raises(ValidationError):
            clamp_page("ten", 0, 100, 1000)


class TestApplyFilterset:
    def test_valid_values_filter(self, order):
        qs = apply_filterset(OrderFilter, {"status": "incoming"}, Order.objects.all())
        assert [o.id for o in qs] == [order.id]

    def test_empty_values_keep_everything(self, order):
        assert apply_filterset(OrderFilter, {}, Order.objects.all()).count() == 1

    @pytest.mark.parametrize(
        "data, field",
        [
            ({"created_by": "abc"}, "created_by"),
            ({"pickup_from": "next tuesday"}, "pickup_from"),
            ({"status": "shipped"}, "status"),
        ],
    )
    def test_invalid_value_raises_validation_error(self, data, field):
        with pytest.raises(ValidationError) as exc_info:
            apply_filterset(OrderFilter, data, Order.objects.all())
        assert list(exc_info.value.details["errors"]) == [field]
        assert exc_info.value.message.startswith(f"{field}: ")

    def test_history_filter_rejects_malformed_order_id(self):
        with pytest.raises(ValidationError):
            apply_filterset(
                OrderHistoryFilter, {"order_id": "not-a-uuid"}, OrderHistory.objects.all()
            )
