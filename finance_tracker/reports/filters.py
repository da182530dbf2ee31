"""
Filtering, Ordering and Pagination

The transaction list view is: filter -> sort -> paginate.
Filtering and pagination never modify the store; they return new lists.
"""

import math
from typing import Iterable, Optional, Sequence

from finance_tracker.models.report import NO_FILTER, Page, TransactionFilter
from finance_tracker.models.transaction import Transaction


SORT_KEYS = ("id", "date")


def _active(value: Optional[str]) -> bool:
    """A text criterion is active unless it is missing, empty or "all"."""
    return value is not None and value != "" and value.lower() != NO_FILTER


def matches(transaction: Transaction, criteria: TransactionFilter) -> bool:
    """Check one transaction against every active criterion (AND)."""
    if _active(criteria.type) and transaction.type.value != criteria.type.lower():
        return False
    if _active(criteria.category) and transaction.category != criteria.category:
        return False
    if criteria.date and transaction.date != criteria.date:
        return False
    if criteria.date_from and transaction.date < criteria.date_from:
        return False
    if criteria.date_to and transaction.date > criteria.date_to:
        return False
    if _active(criteria.text):
        needle = criteria.text.lower()
        if (
            needle not in transaction.title.lower()
            and needle not in transaction.category.lower()
        ):
            return False
    return True


def filter_transactions(
    transactions: Iterable[Transaction],
    criteria: Optional[TransactionFilter] = None,
) -> list[Transaction]:
    """Transactions matching all supplied criteria, in their original order."""
    if criteria is None or criteria.is_empty:
        return list(transactions)
    return [t for t in transactions if matches(t, criteria)]


def sort_transactions(
    transactions: Iterable[Transaction],
    by: str = "id",
    newest_first: bool = True,
) -> list[Transaction]:
    """
    Display order.

    Sorting by date falls back to id for transactions on the same day.
    """
    if by not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {by!r}. Allowed: {SORT_KEYS}")
    if by == "date":
        key = lambda t: (t.date, t.id)
    else:
        key = lambda t: t.id
    return sorted(transactions, key=key, reverse=newest_first)


def total_pages(count: int, page_size: int) -> int:
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    return math.ceil(count / page_size)


def paginate(
    items: Sequence[Transaction],
    page_size: int,
    page_number: int,
) -> Page:
    """
    Slice out one 1-indexed page.

    Returns items [(page_number - 1) * page_size, page_number * page_size),
    clamped to what is available.
    """
    if page_size <= 0:
        raise ValueError("page_size must be positive")
    if page_number < 1:
        raise ValueError("page_number must be at least 1")

    start = (page_number - 1) * page_size
    return Page(
        items=list(items[start:start + page_size]),
        page_number=page_number,
        page_size=page_size,
        total_count=len(items),
        total_pages=total_pages(len(items), page_size),
    )


class PaginationCursor:
    """
    Current page of a list view.

    Navigation outside [1, total_pages] is refused and the current page
    stays where it was. An empty list still has page 1.
    """

    def __init__(self, page_size: int, page_number: int = 1):
        if page_size <= 0:
            raise ValueError("page_size must be positive")
        self.page_size = page_size
        self.page_number = max(page_number, 1)
        self._item_count = 0

    @property
    def total_pages(self) -> int:
        return total_pages(self._item_count, self.page_size)

    def update_count(self, item_count: int) -> None:
        """
        Record the size of the list being paged.

        If the list shrank below the current page (e.g. after a delete
        or a new filter), move back to the last page that exists.
        """
        self._item_count = item_count
        self.page_number = min(self.page_number, max(self.total_pages, 1))

    def go_to(self, page_number: int) -> bool:
        if page_number < 1 or page_number > max(self.total_pages, 1):
            return False
        self.page_number = page_number
        return True

    def next_page(self) -> bool:
        return self.go_to(self.page_number + 1)

    def previous_page(self) -> bool:
        return self.go_to(self.page_number - 1)

    def reset(self) -> None:
        self.page_number = 1

    def page(self, items: Sequence[Transaction]) -> Page:
        """Paginate `items` at the current page."""
        self.update_count(len(items))
        return paginate(items, self.page_size, self.page_number)
