"""Unit tests for the paper-type ledger."""

import math

import pytest

from collectra.domain.entities import CollectionData, PaperType, PaperTypeBuckets
from collectra.domain.errors import ValidationError
from collectra.domain.services import PaperTypeLedger


@pytest.fixture
def data() -> CollectionData:
    return CollectionData(estimated_amount=500, paper_types=PaperTypeBuckets(carton=100))


class TestSave:
    def test_without_actual_amount_uses_paper_type_total(self, data):
        discrepancy = PaperTypeLedger.save(data, {"mixed": 50, "sw": 25.5})

        assert discrepancy is None
        assert data.paper_types.carton == 100
        assert data.paper_types.mixed == 50
        assert data.paper_types.sw == 25.5
        assert data.actual_amount == data.paper_type_total == 175.5

    def test_matching_actual_amount_has_no_discrepancy(self, data):
        discrepancy = PaperTypeLedger.save(data, {"np": 20}, actual_amount=120)

        assert discrepancy is None
        assert data.actual_amount == 120

    def test_decimal_weights_match_their_sum(self):
        data = CollectionData(estimated_amount=1)

        discrepancy = PaperTypeLedger.save(data, {"carton": 0.1, "mixed": 0.2}, actual_amount=0.3)

        assert discrepancy is None
        assert data.amount_discrepancy is None
        assert data.actual_amount == 0.3

    def test_mismatched_actual_amount_is_kept(self, data):
        discrepancy = PaperTypeLedger.save(data, {"np": 20}, actual_amount=150)

        assert discrepancy == 30
        assert data.actual_amount == 150
        assert data.paper_type_total == 120

    def test_invalid_input_applies_nothing(self, data):
        with pytest.raises(ValidationError) as exc_info:
            PaperTypeLedger.save(data, {"mixed": 10, "glass": 5, "sc": -1}, actual_amount=-3)

        fields = {e.field for e in exc_info.value.errors}
        assert fields == {"paper_type", "sc", "actual_amount"}
        assert data.paper_types.mixed == 0
        assert data.actual_amount is None

    def test_empty_save_sets_actual_to_total(self, data):
        PaperTypeLedger.save(data)
        assert data.actual_amount == 100


class TestSingleUpdates:
    def test_set_quantity_by_name(self, data):
        PaperTypeLedger.set_quantity(data, "sc", 12)
        assert data.paper_types.get(PaperType.SORTED_COLOR) == 12.0

    def test_set_quantity_does_not_touch_actual_amount(self, data):
        data.actual_amount = 100
        PaperTypeLedger.set_quantity(data, PaperType.MIXED, 40)
        assert data.actual_amount == 100

    def test_unknown_paper_type(self, data):
        with pytest.raises(ValidationError) as exc_info:
            PaperTypeLedger.set_quantity(data, "glass", 1)
        assert exc_info.value.errors[0].code == "unknown_paper_type"

    def test_set_actual_amount(self, data):
        PaperTypeLedger.set_actual_amount(data, 321)
        assert data.actual_amount == 321.0


@pytest.mark.parametrize(
    "quantity,code",
    [
        (-0.1, "negative_quantity"),
        (math.inf, "invalid_value"),
        (math.nan, "invalid_value"),
        ("12", "invalid_type"),
        (True, "invalid_type"),
        (None, "invalid_type"),
    ],
)
def test_quantity_error(quantity, code):
    error = PaperTypeLedger.quantity_error("carton", quantity)
    assert error is not None
    assert error.code == code


def test_zero_is_a_valid_quantity():
    assert PaperTypeLedger.quantity_error("carton", 0) is None
