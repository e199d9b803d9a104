import logging
from typing import List, Sequence

from solders.pubkey import Pubkey

from .models import InvalidAddress

logger = logging.getLogger(__name__)

# Rows in the recipients file that precede the first address
HEADER_ROWS = 1


def is_valid_address(address: str) -> bool:
    """Return True if address decodes as a 32-byte base58 public key."""
    if not isinstance(address, str) or not address:
        return False
    try:
        Pubkey.from_string(address)
        return True
    except Exception:
        return False


def find_invalid_addresses(addresses: Sequence[str], header_rows: int = HEADER_ROWS) -> List[InvalidAddress]:
    """
    Validate every address and collect the ones that fail.

    Rows are 1-based and include the header, so the first address of a file
    with a single header line is reported as row 2.
    """
    invalid = [
        InvalidAddress(row=index + 1 + header_rows, address=address)
        for index, address in enumerate(addresses)
        if not is_valid_address(address)
    ]
    if invalid:
        logger.debug(f"{len(invalid)} of {len(addresses)} addresses failed validation")
    return invalid
