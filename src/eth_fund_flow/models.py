"""
Data models for Ethereum fund flow analysis.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class Direction(Enum):
    """Which side of a transfer the queried address must be on."""
    OUTGOING = "outgoing"  # queried address is the sender
    INCOMING = "incoming"  # queried address is the recipient


class Role(Enum):
    """Kind of counterparty an analysis produces."""
    BENEFICIARY = "beneficiary"
    PAYER = "payer"

    @property
    def direction(self) -> Direction:
        if self is Role.BENEFICIARY:
            return Direction.OUTGOING
        return Direction.INCOMING

    @property
    def address_key(self) -> str:
        return f"{self.value}_address"


@dataclass
class RawRecord:
    """Fields shared by every record returned from an Etherscan account query."""
    from_address: str
    to_address: str
    value: str
    hash: str
    timestamp: str
    block_number: str = ""

    @property
    def has_error_flag(self) -> bool:
        return False

    @property
    def succeeded(self) -> bool:
        return True

    @classmethod
    def _common_fields(cls, data: Dict[str, Any]) -> Dict[str, str]:
        return {
            "from_address": data.get("from") or "",
            "to_address": data.get("to") or "",
            "value": data.get("value") or "",
            "hash": data.get("hash") or "",
            "timestamp": data.get("timeStamp") or "",
            "block_number": data.get("blockNumber") or "",
        }


@dataclass
class NormalTransaction(RawRecord):
    """Top-level transaction submitted directly to the chain."""
    is_error: str = "0"

    @property
    def has_error_flag(self) -> bool:
        return True

    @property
    def succeeded(self) -> bool:
        return self.is_error == "0"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "NormalTransaction":
        return cls(is_error=data.get("isError", ""), **cls._common_fields(data))


@dataclass
class InternalTransaction(NormalTransaction):
    """Value transfer triggered by contract execution inside a normal transaction."""


@dataclass
class TokenTransfer(RawRecord):
    """ERC-20/ERC-721/ERC-1155 transfer event. Carries no error flag."""
    token_name: str = ""
    token_symbol: str = ""
    token_decimal: str = ""
    contract_address: str = ""

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "TokenTransfer":
        return cls(
            token_name=data.get("tokenName") or "",
            token_symbol=data.get("tokenSymbol") or "",
            token_decimal=data.get("tokenDecimal") or "",
            contract_address=data.get("contractAddress") or "",
            **cls._common_fields(data),
        )


@dataclass(frozen=True)
class TransactionDetail:
    """A single transaction contributing to a counterparty aggregate."""
    amount: float
    display_time: str
    transaction_id: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tx_amount": self.amount,
            "date_time": self.display_time,
            "transaction_id": self.transaction_id,
        }


@dataclass
class CounterpartyAggregate:
    """Running total of value exchanged with one counterparty address."""
    address: str
    role: Role
    total_amount: float = 0.0
    transactions: List[TransactionDetail] = field(default_factory=list)

    def add(self, detail: TransactionDetail) -> None:
        self.transactions.append(detail)
        self.total_amount += detail.amount

    def to_dict(self) -> Dict[str, Any]:
        return {
            self.role.address_key: self.address,
            "amount": self.total_amount,
            "transactions": [tx.to_dict() for tx in self.transactions],
        }
