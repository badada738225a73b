"""Field-level validation for request items.

Simple required/format checks run before a request enters purchasing.
Each validator returns an error message or None.
"""

import math
from datetime import date, datetime
from typing import TYPE_CHECKING
from urllib.parse import urlparse

from procurement.domain.value_objects import Priority

if TYPE_CHECKING:
    from procurement.domain.entities import RequestItem


def validate_item_name(value: str) -> str | None:
    if not value or not value.strip():
        return "Item name is required"
    if len(value.strip()) < 2:
        return "Item name must be at least 2 characters"
    return None


def validate_quantity(value: float | None) -> str | None:
    if value is None:
        return "Quantity is required"
    if not math.isfinite(value) or value <= 0:
        return "Quantity must be a positive number"
    return None


def validate_justification(value: str) -> str | None:
    if not value or not value.strip():
        return "Justification is required"
    if len(value.strip()) < 10:
        return "Please provide a detailed justification (at least 10 characters)"
    return None


def validate_supplier_reference(value: str) -> str | None:
    # Only references that look like URLs must parse as one
    if value and "http" in value:
        parsed = urlparse(value.strip())
        if not parsed.scheme or not parsed.netloc:
            return "Please enter a valid URL or reference"
    return None


def validate_estimated_cost(value: float | None) -> str | None:
    if value is not None and (not math.isfinite(value) or value < 0):
        return "Cost must be a positive number"
    return None


def validate_priority(value: str | None) -> str | None:
    if value not in {p.value for p in Priority}:
        return "Priority is required"
    return None


def validate_needed_by_date(value: str, today: date | None = None) -> str | None:
    if not value or not value.strip():
        return None
    try:
        needed_by = datetime.fromisoformat(value.strip()).date()
    except ValueError:
        return "Please enter a valid date"
    if needed_by < (today or date.today()):
        return "Needed by date cannot be in the past"
    return None


def validate_item(item: "RequestItem", today: date | None = None) -> dict[str, str]:
    """Validate one item.

    Args:
        item: Item to check.
        today: Reference date for the needed-by check.

    Returns:
        Mapping of camelCase field name to error message; empty if valid.
    """
    priority = item.priority.value if item.priority else None
    checks = {
        "itemName": validate_item_name(item.item_name),
        "quantity": validate_quantity(item.quantity),
        "justification": validate_justification(item.justification),
        "supplierReference": validate_supplier_reference(item.supplier_reference),
        "estimatedCost": validate_estimated_cost(item.estimated_cost),
        "priority": validate_priority(priority),
        "neededByDate": validate_needed_by_date(item.needed_by_date, today),
    }
    return {field: message for field, message in checks.items() if message}


def validate_items(items: list["RequestItem"], today: date | None = None) -> dict[str, dict[str, str]]:
    """Validate every item of a request.

    Returns:
        Mapping of item id to field errors, containing only failing items.
    """
    errors: dict[str, dict[str, str]] = {}
    for item in items:
        item_errors = validate_item(item, today)
        if item_errors:
            errors[item.id] = item_errors
    return errors
