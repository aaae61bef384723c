from fastapi import HTTPException
import structlog

from config import MAX_ACCOUNT_ID
from exceptions import AccountNotFoundError, InsufficientLimitError
from models import BalanceSummary, StatementResponse, Transaction, TransactionResponse
from repositories import AccountTable

# Configure structured logging
logger = structlog.get_logger()


def parse_account_id(raw_id: str) -> int:
    """Turn a path segment into an account id, or 404 when it cannot be one."""
    if not raw_id.isdigit() or not raw_id.isascii():
        raise HTTPException(status_code=404, detail="Account not found")
    account_id = int(raw_id)
    if account_id > MAX_ACCOUNT_ID:
        raise HTTPException(status_code=404, detail="Account not found")
    return account_id


class AccountService:
    def __init__(self, account_table: AccountTable):
        self.account_table = account_table

    async def post_transaction(self, account_id: int, transaction: Transaction) -> TransactionResponse:
        """Record a credit or debit against an account."""

        logger.info(
            "Processing transaction",
            account_id=account_id,
            amount=transaction.value,
            type=transaction.kind.value
        )

        try:
            balance, limit = await self.account_table.post_transaction(account_id, transaction)
        except AccountNotFoundError:
            logger.warning("Account not found", account_id=account_id)
            raise HTTPException(
                status_code=404,
                detail="Account not found"
            )
        except InsufficientLimitError as e:
            logger.warning(
                "Insufficient limit for debit",
                account_id=account_id,
                current_balance=e.balance,
                limit=e.limit,
                requested_amount=e.value
            )
            raise HTTPException(
                status_code=422,
                detail=str(e)
            )

        logger.info(
            "Transaction processed successfully",
            account_id=account_id,
            new_balance=balance
        )

        return TransactionResponse(limite=limit, saldo=balance, account=account_id)

    async def get_statement(self, account_id: int) -> StatementResponse:
        """Read balance, limit and the most recent transactions of an account."""
        try:
            statement = await self.account_table.get_statement(account_id)
        except AccountNotFoundError:
            logger.warning("Account not found", account_id=account_id)
            raise HTTPException(
                status_code=404,
                detail="Account not found"
            )

        logger.debug(
            "Statement taken",
            account_id=account_id,
            balance=statement.balance,
            transactions=len(statement.transactions)
        )

        return StatementResponse(
            account=account_id,
            saldo=BalanceSummary(
                total=statement.balance,
                limite=statement.limit,
                data_extrato=statement.taken_at
            ),
            ultimas_transacoes=statement.transactions
        )


# Factory function for dependency injection
def get_account_service(account_table: AccountTable) -> AccountService:
    return AccountService(account_table)
