from typing import List, NamedTuple
import structlog

from exceptions import InsufficientLimitError
from history import BoundedHistory, DEFAULT_CAPACITY
from locks import ReadWriteLock
from models import INT64_MAX, INT64_MIN, Transaction, TransactionType

logger = structlog.get_logger()


class AccountSnapshot(NamedTuple):
    balance: int
    limit: int
    transactions: List[Transaction]


class Account:
    """Balance, overdraft limit and recent history of one customer.

    `apply` and `snapshot` never suspend; callers serialize them through
    `lock` (writer side for `apply`, reader side for `snapshot`).
    """

    def __init__(self, limit: int, history_capacity: int = DEFAULT_CAPACITY):
        if limit < 0:
            raise ValueError(f"Account limit must be non-negative, got {limit}")
        self._limit = limit
        self.balance = 0
        self.accepted = 0
        self.history: BoundedHistory[Transaction] = BoundedHistory(history_capacity)
        self.lock = ReadWriteLock()

    @classmethod
    def with_limit(cls, limit: int, history_capacity: int = DEFAULT_CAPACITY) -> "Account":
        return cls(limit, history_capacity)

    @property
    def limit(self) -> int:
        return self._limit

    def apply(self, transaction: Transaction) -> None:
        """Validate and record a transaction, or raise InsufficientLimitError."""
        if transaction.kind == TransactionType.CREDIT:
            new_balance = self.balance + transaction.value
        else:
            if self.balance + self._limit < transaction.value:
                raise InsufficientLimitError(self.balance, self._limit, transaction.value)
            new_balance = self.balance - transaction.value

        if not INT64_MIN <= new_balance <= INT64_MAX:
            logger.debug(
                "Balance would leave int64 range",
                balance=self.balance,
                value=transaction.value,
                type=transaction.kind.value
            )
            raise InsufficientLimitError(self.balance, self._limit, transaction.value)

        self.balance = new_balance
        self.history.push(transaction)
        self.accepted += 1

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(self.balance, self._limit, self.history.snapshot())

    def __repr__(self) -> str:
        return f"Account(limit={self._limit}, balance={self.balance}, history={len(self.history)})"
