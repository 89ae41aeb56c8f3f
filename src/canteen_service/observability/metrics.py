"""Custom metrics for the canteen service."""

from opentelemetry import metrics

meter = metrics.get_meter("canteen-svc")

menu_reference_added_counter = meter.create_counter(
    name="menu_reference_added_total",
    description="Total number of menu item references appended to a day menu",
    unit="1",
)

menu_reference_removed_counter = meter.create_counter(
    name="menu_reference_removed_total",
    description="Total number of menu item references removed from a day menu",
    unit="1",
)

dangling_reference_counter = meter.create_counter(
    name="menu_dangling_reference_total",
    description="References filtered out on read because their menu item no longer exists",
    unit="1",
)

menu_update_conflict_counter = meter.create_counter(
    name="menu_update_conflict_total",
    description="Optimistic menu writes rejected because the menu changed concurrently",
    unit="1",
)

store_fault_counter = meter.create_counter(
    name="store_fault_total",
    description="Document store failures surfaced to callers",
    unit="1",
)


def record_reference_added(day: str) -> None:
    """Record a menu item reference appended to a day menu."""
    menu_reference_added_counter.add(1, {"day": day})


def record_references_removed(day: str, count: int) -> None:
    """Record references removed from a day menu.

    Args:
        day: The menu day
        count: Number of matching references removed (may be zero)
    """
    if count > 0:
        menu_reference_removed_counter.add(count, {"day": day})


def record_dangling_references(count: int) -> None:
    if count > 0:
        dangling_reference_counter.add(count)


def record_menu_update_conflict(day: str) -> None:
    menu_update_conflict_counter.add(1, {"day": day})


def record_store_fault(operation: str) -> None:
    """Record a store failure.

    Args:
        operation: The service operation that failed
    """
    store_fault_counter.add(1, {"operation": operation})
