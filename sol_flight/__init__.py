"""
SOL Flight - batched SOL distribution to a list of recipients on Solana
"""

__version__ = "0.1.0"

from .models import (
    Batch, DistributionResult, TransferSuccess, TransferFailure, RunState,
    SolFlightError, ConfigurationError, DistributionAborted,
)
from .address_validator import is_valid_address
from .batching import chunk
from .transfer_submitter import TransferSubmitter
from .distribution import SolDistributor

__all__ = [
    "Batch",
    "DistributionResult",
    "TransferSuccess",
    "TransferFailure",
    "RunState",
    "SolFlightError",
    "ConfigurationError",
    "DistributionAborted",
    "is_valid_address",
    "chunk",
    "TransferSubmitter",
    "SolDistributor",
]
