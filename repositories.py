from datetime import datetime
from types import MappingProxyType
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple
import structlog

from accounts import Account
from config import get_settings
from exceptions import AccountNotFoundError
from history import DEFAULT_CAPACITY
from models import Transaction, utc_now

logger = structlog.get_logger()


class Statement(NamedTuple):
    balance: int
    limit: int
    taken_at: datetime
    transactions: List[Transaction]


class AccountTable:
    """Fixed roster of accounts keyed by a small integer id.

    The mapping is built once and never changes, so lookups take no lock;
    only the state inside each Account is guarded, by that account's own
    reader-writer lock.
    """

    def __init__(self, accounts: Mapping[int, Account]):
        self._accounts: Mapping[int, Account] = MappingProxyType(dict(accounts))

    @classmethod
    def from_seed(cls, seed: Mapping[int, int], history_capacity: int = DEFAULT_CAPACITY) -> "AccountTable":
        return cls({
            account_id: Account.with_limit(limit, history_capacity)
            for account_id, limit in seed.items()
        })

    def get(self, account_id: int) -> Optional[Account]:
        return self._accounts.get(account_id)

    def _resolve(self, account_id: int) -> Account:
        account = self._accounts.get(account_id)
        if account is None:
            raise AccountNotFoundError(account_id)
        return account

    async def post_transaction(self, account_id: int, transaction: Transaction) -> Tuple[int, int]:
        """Apply a transaction and return the resulting (balance, limit)."""
        account = self._resolve(account_id)
        async with account.lock.writing():
            account.apply(transaction)
            return account.balance, account.limit

    async def get_statement(self, account_id: int) -> Statement:
        account = self._resolve(account_id)
        async with account.lock.reading():
            snapshot = account.snapshot()
        return Statement(snapshot.balance, snapshot.limit, utc_now(), snapshot.transactions)

    def transactions_count(self) -> int:
        return sum(account.accepted for account in self._accounts.values())

    def __contains__(self, account_id) -> bool:
        return account_id in self._accounts

    def __len__(self) -> int:
        return len(self._accounts)


def build_account_table(seed: Optional[Dict[int, int]] = None) -> AccountTable:
    settings = get_settings()
    seed = settings.accounts if seed is None else seed
    logger.debug("Seeding accounts", accounts=len(seed), history_capacity=settings.history_capacity)
    return AccountTable.from_seed(seed, settings.history_capacity)


# Process-wide table; state lives in this process only
_account_table: Optional[AccountTable] = None


def get_account_repository() -> AccountTable:
    global _account_table
    if _account_table is None:
        _account_table = build_account_table()
    return _account_table


# For tests
def reset_repositories() -> None:
    """Reset all accounts to their seeded state (for testing only)."""
    global _account_table
    _account_table = build_account_table()
