from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Tuple, Union

LAMPORTS_PER_SOL = 1_000_000_000
SOLSCAN_TX_URL = "https://solscan.io/tx/{signature}?cluster={network}"


def sol_to_lamports(amount: Union[Decimal, str, float]) -> int:
    """Convert SOL to lamports, truncating any fraction of a lamport."""
    return int(Decimal(str(amount)) * LAMPORTS_PER_SOL)


def lamports_to_sol(lamports: int) -> Decimal:
    return Decimal(lamports) / LAMPORTS_PER_SOL


class RunState(Enum):
    """Lifecycle of a single distribution run."""
    INIT = "init"
    BALANCE_CHECKED = "balance_checked"
    VALIDATED = "validated"
    BATCHED = "batched"
    SUBMITTING = "submitting"
    SUMMARIZED = "summarized"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Batch:
    """A group of recipients sent in one transaction"""
    index: int
    addresses: Tuple[str, ...]

    def __len__(self) -> int:
        return len(self.addresses)


@dataclass(frozen=True)
class TransferSuccess:
    signature: str
    addresses: Tuple[str, ...]
    fee_lamports: Optional[int] = None
    attempts: int = 1

    @property
    def success(self) -> bool:
        return True


@dataclass(frozen=True)
class TransferFailure:
    addresses: Tuple[str, ...]
    error_message: str
    retry_count: int

    @property
    def success(self) -> bool:
        return False


TransferOutcome = Union[TransferSuccess, TransferFailure]


@dataclass(frozen=True)
class BatchReceipt:
    """A confirmed batch together with its explorer link"""
    batch_index: int
    signature: str
    addresses: Tuple[str, ...]
    explorer_url: str
    fee_lamports: Optional[int] = None


@dataclass(frozen=True)
class FailedTransfer:
    address: str
    error: str
    retries: int


@dataclass(frozen=True)
class InvalidAddress:
    """An address that failed validation, with its row in the source file"""
    row: int
    address: str

    def __str__(self) -> str:
        return f"Row {self.row}: {self.address}"


@dataclass
class DistributionResult:
    """Aggregate outcome of a distribution run"""
    recipient_count: int
    amount_per_recipient: Decimal
    successful: int = 0
    failed: int = 0
    transactions: List[BatchReceipt] = field(default_factory=list)
    failures: List[FailedTransfer] = field(default_factory=list)
    initial_balance_lamports: int = 0
    final_balance_lamports: Optional[int] = None
    started_at: float = 0.0
    finished_at: Optional[float] = None

    @property
    def total_transactions(self) -> int:
        return len(self.transactions)

    @property
    def duration_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return self.finished_at - self.started_at

    @property
    def total_fees_lamports(self) -> int:
        return sum(tx.fee_lamports or 0 for tx in self.transactions)

    @property
    def spent_lamports(self) -> Optional[int]:
        if self.final_balance_lamports is None:
            return None
        return self.initial_balance_lamports - self.final_balance_lamports

    @property
    def average_recipients_per_transaction(self) -> float:
        if not self.transactions:
            return 0.0
        return self.recipient_count / len(self.transactions)

    def record_success(self, batch_index: int, outcome: TransferSuccess, explorer_url: str):
        self.successful += len(outcome.addresses)
        self.transactions.append(BatchReceipt(
            batch_index=batch_index,
            signature=outcome.signature,
            addresses=outcome.addresses,
            explorer_url=explorer_url,
            fee_lamports=outcome.fee_lamports,
        ))

    def record_failure(self, outcome: TransferFailure):
        self.failed += len(outcome.addresses)
        for address in outcome.addresses:
            self.failures.append(FailedTransfer(
                address=address,
                error=outcome.error_message or "Unknown error",
                retries=outcome.retry_count,
            ))

    def to_dict(self) -> dict:
        return {
            "recipients": self.recipient_count,
            "amount_per_recipient": str(self.amount_per_recipient),
            "successful": self.successful,
            "failed": self.failed,
            "total_transactions": self.total_transactions,
            "duration_seconds": round(self.duration_seconds, 2),
            "initial_balance_sol": str(lamports_to_sol(self.initial_balance_lamports)),
            "final_balance_sol": (
                str(lamports_to_sol(self.final_balance_lamports))
                if self.final_balance_lamports is not None else None
            ),
            "total_fees_sol": str(lamports_to_sol(self.total_fees_lamports)),
            "transactions": [
                {
                    "batch": tx.batch_index + 1,
                    "signature": tx.signature,
                    "explorer_url": tx.explorer_url,
                    "addresses": list(tx.addresses),
                }
                for tx in self.transactions
            ],
            "failures": [
                {"address": f.address, "error": f.error, "retries": f.retries}
                for f in self.failures
            ],
        }


class SolFlightError(Exception):
    """Base exception for distribution errors"""
    pass


class ConfigurationError(SolFlightError):
    """Missing or malformed configuration, raised before any network call"""
    pass


class DistributionAborted(SolFlightError):
    """Run halted before any funds moved"""

    def __init__(self, message: str, state: RunState):
        super().__init__(message)
        self.state = state


class EmptyRecipientListError(DistributionAborted):
    def __init__(self):
        super().__init__("No recipients found in CSV file", RunState.INIT)


class InsufficientBalanceError(DistributionAborted):
    def __init__(self, balance_lamports: int, required_lamports: int):
        self.balance_lamports = balance_lamports
        self.required_lamports = required_lamports
        super().__init__(
            f"Insufficient balance. Need at least "
            f"{lamports_to_sol(required_lamports):.4f} SOL (including fees), "
            f"available: {lamports_to_sol(balance_lamports):.4f} SOL",
            RunState.INIT,
        )


class InvalidAddressesError(DistributionAborted):
    def __init__(self, invalid: List[InvalidAddress]):
        self.invalid = list(invalid)
        details = "\n".join(f"  - {entry}" for entry in self.invalid)
        super().__init__(
            f"Found {len(self.invalid)} invalid address(es), please fix the CSV file:\n{details}",
            RunState.BALANCE_CHECKED,
        )
