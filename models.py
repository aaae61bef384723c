from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, StrictInt, StrictStr, field_serializer, field_validator
from enum import Enum
from typing import List, Optional
from datetime import datetime, timezone
import re

# Balances and values live in the signed 64-bit range
INT64_MAX = 2**63 - 1
INT64_MIN = -(2**63)

DESCRIPTION_MAX_LENGTH = 10

RFC3339_PATTERN = re.compile(
    r"^\d{4}-\d{2}-\d{2}[Tt ]\d{2}:\d{2}:\d{2}(\.\d+)?([Zz]|[+-]\d{2}:\d{2})$"
)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_rfc3339(value: datetime) -> str:
    value = value.astimezone(timezone.utc)
    return value.isoformat().replace("+00:00", "Z")


class TransactionType(str, Enum):
    CREDIT = "C"
    DEBIT = "D"


class Transaction(BaseModel):
    """A credit or debit against one account, immutable once built.

    Field names follow the wire format (`valor`, `tipo`, `descricao`,
    `realizada_em`) through aliases, so the same model decodes request
    bodies and encodes statement entries.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: StrictInt = Field(
        ...,
        alias="valor",
        ge=0,
        le=INT64_MAX,
        description="Amount in the smallest currency unit"
    )
    kind: TransactionType = Field(..., alias="tipo", description="C for credit, D for debit")
    description: StrictStr = Field(
        ...,
        alias="descricao",
        description="Short free-text description, 1 to 10 UTF-8 bytes"
    )
    created_at: AwareDatetime = Field(
        default_factory=utc_now,
        alias="realizada_em",
        description="RFC 3339 instant; defaults to the time the request was received"
    )

    @field_validator("description")
    @classmethod
    def validate_description(cls, v):
        if not 1 <= len(v.encode("utf-8")) <= DESCRIPTION_MAX_LENGTH:
            raise ValueError(f"Description must be 1 to {DESCRIPTION_MAX_LENGTH} bytes long")
        return v

    @field_validator("created_at", mode="before")
    @classmethod
    def validate_created_at(cls, v):
        if isinstance(v, datetime):
            return v
        if not isinstance(v, str) or not RFC3339_PATTERN.match(v):
            raise ValueError("realizada_em must be an RFC 3339 timestamp")
        return v

    @field_serializer("created_at")
    def serialize_created_at(self, value: datetime) -> str:
        return format_rfc3339(value)

    @property
    def signed_value(self) -> int:
        return self.value if self.kind == TransactionType.CREDIT else -self.value


class TransactionResponse(BaseModel):
    limite: int = Field(..., description="Account overdraft limit")
    saldo: int = Field(..., description="Balance after the transaction")
    account: Optional[int] = Field(default=None, description="Account identifier")


class BalanceSummary(BaseModel):
    total: int = Field(..., description="Current balance")
    limite: int = Field(..., description="Account overdraft limit")
    data_extrato: datetime = Field(..., description="Server time the statement was taken")

    @field_serializer("data_extrato")
    def serialize_data_extrato(self, value: datetime) -> str:
        return format_rfc3339(value)


class StatementResponse(BaseModel):
    account: Optional[int] = Field(default=None, description="Account identifier")
    saldo: BalanceSummary
    ultimas_transacoes: List[Transaction] = Field(
        default_factory=list,
        description="Most recent transactions, newest first"
    )


class ErrorResponse(BaseModel):
    detail: str = Field(..., description="Error description")
    error_code: str = Field(..., description="Machine-readable error code")
    timestamp: datetime = Field(default_factory=utc_now, description="Error timestamp")


class HealthResponse(BaseModel):
    status: str = Field(..., description="Service health status")
    timestamp: datetime = Field(default_factory=utc_now)
    accounts_count: int = Field(..., description="Number of accounts in system")
    transactions_processed: int = Field(..., description="Total transactions accepted")
