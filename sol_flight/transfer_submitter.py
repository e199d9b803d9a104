"""
Batched SOL transfers.

Every batch is sent as one transaction holding a system transfer instruction
per recipient, so the ledger applies the whole batch or none of it. Failed
batches are resubmitted in full with a fresh blockhash.

Retries are not idempotent: if a transaction lands but its confirmation is
lost (e.g. the confirmation wait times out), the retry sends the batch again
and the recipients are paid twice.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solana.rpc.types import TxOpts
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.system_program import TransferParams, transfer
from solders.transaction import Transaction

from .models import SolFlightError, TransferFailure, TransferOutcome, TransferSuccess, sol_to_lamports


MAX_RETRIES = 3
RETRY_BASE_DELAY = 1.0


class TransactionFailedError(SolFlightError):
    """Raised when a confirmed transaction carries an on-chain error."""
    pass


def build_transfer_instructions(sender: Pubkey, addresses: Sequence[str], lamports: int) -> list:
    return [
        transfer(TransferParams(
            from_pubkey=sender,
            to_pubkey=Pubkey.from_string(address),
            lamports=lamports,
        ))
        for address in addresses
    ]


class TransferSubmitter:
    """Sends one batch per transaction with bounded retry and linear backoff"""

    def __init__(self, client: AsyncClient, max_retries: int = MAX_RETRIES,
                 retry_base_delay: float = RETRY_BASE_DELAY):
        self.client = client
        self.max_retries = max_retries
        self.retry_base_delay = retry_base_delay
        self.logger = logging.getLogger(__name__)

    async def submit(self, sender: Keypair, addresses: Sequence[str],
                     amount_per_recipient: Decimal, label: str = "batch") -> TransferOutcome:
        """
        Transfer amount_per_recipient SOL to every address in one transaction.

        Tries up to max_retries + 1 times, waiting retry_base_delay * attempt
        seconds before retry number ``attempt``. Never raises for submission
        or confirmation errors; they come back as a TransferFailure.

        Args:
            sender: Keypair paying for and signing the transfers
            addresses: Recipients of this batch
            amount_per_recipient: Amount in SOL, truncated to whole lamports
            label: Name used in log messages

        Returns:
            TransferSuccess or TransferFailure
        """
        addresses = tuple(addresses)
        lamports = sol_to_lamports(amount_per_recipient)
        last_error: Optional[str] = None

        for attempt in range(self.max_retries + 1):
            if attempt:
                delay = self.retry_base_delay * attempt
                self.logger.warning(
                    f"Retry {attempt}/{self.max_retries} for {label} in {delay:.1f}s: {last_error}"
                )
                await asyncio.sleep(delay)

            try:
                signature, fee = await self._send_batch(sender, addresses, lamports)
            except Exception as e:
                last_error = str(e) or e.__class__.__name__
                self.logger.debug(f"{label} attempt {attempt + 1} failed", exc_info=True)
                continue

            self.logger.info(f"{label} confirmed: {signature}")
            return TransferSuccess(
                signature=signature,
                addresses=addresses,
                fee_lamports=fee,
                attempts=attempt + 1,
            )

        self.logger.error(f"{label} failed after {self.max_retries} retries: {last_error}")
        return TransferFailure(
            addresses=addresses,
            error_message=last_error or "Unknown error",
            retry_count=self.max_retries,
        )

    async def _send_batch(self, sender: Keypair, addresses: Tuple[str, ...],
                          lamports: int) -> Tuple[str, Optional[int]]:
        """Build, sign, send and confirm a single transaction for the batch."""
        instructions = build_transfer_instructions(sender.pubkey(), addresses, lamports)

        blockhash_resp = await self.client.get_latest_blockhash(Confirmed)
        blockhash = blockhash_resp.value.blockhash
        last_valid_block_height = blockhash_resp.value.last_valid_block_height

        message = Message.new_with_blockhash(instructions, sender.pubkey(), blockhash)
        transaction = Transaction([sender], message, blockhash)
        fee = await self._fee_for_message(message)

        send_resp = await self.client.send_raw_transaction(
            bytes(transaction),
            opts=TxOpts(skip_confirmation=True, preflight_commitment=Confirmed),
        )
        signature = send_resp.value
        self.logger.debug(f"Submitted transaction {signature} for {len(addresses)} recipients")

        confirm_resp = await self.client.confirm_transaction(
            signature,
            Confirmed,
            last_valid_block_height=last_valid_block_height,
        )
        status = confirm_resp.value[0] if confirm_resp.value else None
        if status is not None and status.err is not None:
            raise TransactionFailedError(f"Transaction {signature} failed on-chain: {status.err}")

        return str(signature), fee

    async def _fee_for_message(self, message: Message) -> Optional[int]:
        try:
            resp = await self.client.get_fee_for_message(message, Confirmed)
            return resp.value
        except Exception as e:
            self.logger.warning(f"Could not fetch fee for message: {e}")
            return None
