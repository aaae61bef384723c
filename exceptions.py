class AccountError(Exception):
    """Base class for account domain errors."""


class AccountNotFoundError(AccountError):
    def __init__(self, account_id):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class InsufficientLimitError(AccountError):
    """Raised when a debit would drive the balance below -limit."""

    def __init__(self, balance: int, limit: int, value: int):
        self.balance = balance
        self.limit = limit
        self.value = value
        super().__init__("Limite insuficiente")
