from __future__ import annotations

from datetime import date

import pytest
from pydantic import ValidationError

from modules.orders.dtos import CreateOrderDTO, OrderStatusEnum, UpdateOrderDTO

pytestmark = pytest.mark.unit


class TestCreateOrderDTO:
    def test_defaults_to_incoming(self):
        dto = CreateOrderDTO(customer_name="Jane", order_details="2kg vanilla")
        assert dto.status == OrderStatusEnum.INCOMING
        assert dto.location is None

    @pytest.mark.parametrize("field", ["customer_name", "order_details"])
    def test_required_text_not_blank(self, field):
        data = {"customer_name": "Jane", "order_details": "cake", field: "   "}
        with pytest.raises(ValidationError):
            CreateOrderDTO(**data)

    def test_unknown_status(self):
        with pytest.raises(ValidationError):
            CreateOrderDTO(customer_name="Jane", order_details="cake", status="shipped")

    def test_pickup_date_parsed(self):
        dto = CreateOrderDTO(
            customer_name="Jane", order_details="cake", pickup_date="2025-06-01"
        )
        assert dto.pickup_date == date(2025, 6, 1)


class TestUpdateOrderDTO:
    def test_changes_contain_only_present_fields(self):
        dto = UpdateOrderDTO.model_validate({"status": "accepted", "location": None})
        assert dto.changes() == {"status": "accepted", "location": None}

    def test_unknown_keys_ignored(self):
        dto = UpdateOrderDTO.model_validate({"id": "x", "created_at": "now", "image": "u"})
        assert dto.changes() == {"image": "u"}

    def test_present_blank_customer_name_rejected(self):
        with pytest.raises(ValidationError):
            UpdateOrderDTO.model_validate({"customer_name": ""})

    def test_null_status_rejected(self):
        with pytest.raises(ValidationError):
            UpdateOrderDTO.model_validate({"status": None})

    def test_text_is_trimmed(self):
        dto = UpdateOrderDTO.model_validate({"order_details": "  lemon tart  "})
        assert dto.changes() == {"order_details": "lemon tart"}
