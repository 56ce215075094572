"""
Card Transactions Module

Append-only per-card transaction log with date filtering and pagination.
"""

from datetime import datetime, timezone, timedelta
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .storage import StorageInterface, StorageRecord
from .generators import generate_id


DATE_FORMAT = "%Y-%m-%d"


@dataclass
class Transaction(StorageRecord):
    """A single card transaction"""
    card_id: str
    amount: float
    merchant: str
    date: datetime
    status: str = "Completed"
    type: str = "Purchase"

    datetime_fields = ("date",)


@dataclass
class TransactionPage:
    """One page of a card's transactions"""
    transactions: List[Transaction] = field(default_factory=list)
    page: int = 1
    limit: int = 20
    total: int = 0
    total_pages: int = 0


def _positive_int(value: Union[str, int, None], default: int) -> int:
    """Parse a paging parameter; missing, malformed or non-positive means default"""
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed > 0 else default


def _parse_day(value: Optional[str]) -> Optional[datetime]:
    """Parse YYYY-MM-DD as UTC midnight; malformed input is ignored"""
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


class TransactionLog:
    """Records and pages through card transactions"""

    def __init__(self, storage: StorageInterface, default_page: int = 1, default_limit: int = 20):
        self.storage = storage
        self.transactions_table = "transactions"
        self.default_page = default_page
        self.default_limit = default_limit

    def record(
        self,
        card_id: str,
        amount: float,
        merchant: str,
        date: Optional[datetime] = None,
        status: str = "Completed",
        type: str = "Purchase"
    ) -> Transaction:
        """Append a transaction to a card's log"""
        date = date or datetime.now(timezone.utc)
        if date.tzinfo is None:
            date = date.replace(tzinfo=timezone.utc)

        transaction = Transaction(
            id=generate_id(),
            card_id=card_id,
            amount=amount,
            merchant=merchant,
            date=date,
            status=status,
            type=type
        )
        self.storage.save(self.transactions_table, transaction.id, transaction.to_dict())
        return transaction

    def get_card_transactions(self, card_id: str) -> List[Transaction]:
        """All transactions for a card, in recording order"""
        records = self.storage.find(self.transactions_table, {"card_id": card_id})
        return [Transaction.from_dict(data) for data in records]

    def list_for_card(
        self,
        card_id: str,
        page: Union[str, int, None] = None,
        limit: Union[str, int, None] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None
    ) -> TransactionPage:
        """
        Filter and paginate a card's transactions.

        Args:
            card_id: Card whose log to read
            page: 1-based page number
            limit: Page size
            start_date: YYYY-MM-DD, earlier transactions are dropped
            end_date: YYYY-MM-DD, inclusive of the whole day

        Returns:
            The requested page plus total count and page count
        """
        page = _positive_int(page, self.default_page)
        limit = _positive_int(limit, self.default_limit)
        start = _parse_day(start_date)
        end = _parse_day(end_date)
        if end is not None:
            end = end + timedelta(days=1)

        filtered = []
        for txn in self.get_card_transactions(card_id):
            if start is not None and txn.date < start:
                continue
            if end is not None and txn.date > end:
                continue
            filtered.append(txn)

        total = len(filtered)
        offset = (page - 1) * limit

        return TransactionPage(
            transactions=filtered[offset:offset + limit],
            page=page,
            limit=limit,
            total=total,
            total_pages=(total + limit - 1) // limit
        )
