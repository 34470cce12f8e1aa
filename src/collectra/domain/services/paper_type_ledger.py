"""Paper-type ledger for a session's collection data.

Holds the rules for recording per-material quantities and the collected
total. The ledger never reconciles an explicit actual amount against the
bucket sum; it reports the mismatch and keeps both values.
"""

import math
from collections.abc import Mapping

from collectra.domain.entities import CollectionData, PaperType
from collectra.domain.errors import FieldError, ValidationError


class PaperTypeLedger:
    """Validation and update rules for CollectionData."""

    @staticmethod
    def parse_paper_type(value: str | PaperType) -> PaperType:
        """Resolve a paper type name.

        Raises:
            ValidationError: If the name is not one of the five buckets.
        """
        try:
            return PaperType(value)
        except ValueError:
            allowed = ", ".join(p.value for p in PaperType)
            raise ValidationError.single(
                field="paper_type",
                message=f"Unknown paper type '{value}'. Must be one of: {allowed}",
                code="unknown_paper_type",
            ) from None

    @staticmethod
    def quantity_error(field: str, quantity: object) -> FieldError | None:
        """Return a FieldError if quantity is not a finite, non-negative number."""
        if isinstance(quantity, bool) or not isinstance(quantity, (int, float)):
            return FieldError(field=field, message="Quantity must be a number", code="invalid_type")
        if not math.isfinite(quantity):
            return FieldError(field=field, message="Quantity must be finite", code="invalid_value")
        if quantity < 0:
            return FieldError(field=field, message="Quantity cannot be negative", code="negative_quantity")
        return None

    @classmethod
    def validate_quantity(cls, field: str, quantity: object) -> float:
        error = cls.quantity_error(field, quantity)
        if error:
            raise ValidationError([error])
        return float(quantity)  # type: ignore[arg-type]

    @classmethod
    def set_quantity(cls, data: CollectionData, paper_type: str | PaperType, quantity: float) -> None:
        """Set one bucket."""
        resolved = cls.parse_paper_type(paper_type)
        data.paper_types.set(resolved, cls.validate_quantity(resolved.value, quantity))

    @classmethod
    def set_actual_amount(cls, data: CollectionData, quantity: float) -> None:
        data.actual_amount = cls.validate_quantity("actual_amount", quantity)

    @classmethod
    def save(
        cls,
        data: CollectionData,
        paper_types: Mapping[str, float] | None = None,
        actual_amount: float | None = None,
    ) -> float | None:
        """Apply a "save collection data" request.

        Merges the supplied buckets, then sets the actual amount to the
        supplied value or, when none is supplied, to the bucket total.

        Returns:
            The discrepancy (actual - total) when a supplied actual amount
            differs from the bucket total, otherwise None.

        Raises:
            ValidationError: If any paper type or quantity is invalid. Nothing
                is applied in that case.
        """
        errors: list[FieldError] = []
        updates: dict[PaperType, float] = {}

        for name, quantity in (paper_types or {}).items():
            try:
                paper_type = cls.parse_paper_type(name)
            except ValidationError as e:
                errors.extend(e.errors)
                continue
            error = cls.quantity_error(paper_type.value, quantity)
            if error:
                errors.append(error)
            else:
                updates[paper_type] = float(quantity)

        if actual_amount is not None:
            error = cls.quantity_error("actual_amount", actual_amount)
            if error:
                errors.append(error)

        if errors:
            raise ValidationError(errors)

        for paper_type, quantity in updates.items():
            data.paper_types.set(paper_type, quantity)

        total = data.paper_types.total
        if actual_amount is None:
            data.actual_amount = total
            return None

        data.actual_amount = float(actual_amount)
        return data.amount_discrepancy
