"""
Shared fixtures: an in-memory ledger that stands in for the Solana RPC client.
"""

import asyncio
from types import SimpleNamespace
from typing import Dict, List, Optional

import pytest
from solders.hash import Hash
from solders.keypair import Keypair
from solders.transaction import Transaction

from sol_flight.config import DistributionSettings
from sol_flight.models import LAMPORTS_PER_SOL

FEE_PER_TX = 5000


def make_addresses(count: int) -> List[str]:
    return [str(Keypair().pubkey()) for _ in range(count)]


class FakeLedger:
    """
    Mimics the subset of AsyncClient used by the distributor.

    Transactions passed to send_raw_transaction are decoded and applied to
    in-memory balances, so tests can check what actually landed.
    """

    def __init__(self, balance_lamports: int = LAMPORTS_PER_SOL, fee: Optional[int] = FEE_PER_TX):
        self.balance = balance_lamports
        self.fee = fee
        self.credits: Dict[str, int] = {}
        self.landed: List[Transaction] = []
        self.send_attempts = 0
        self.balance_queries = 0
        # Exceptions raised by successive calls; None means succeed
        self.send_errors: List[Optional[Exception]] = []
        self.confirm_errors: List[Optional[Exception]] = []
        self.fail_addresses: set = set()
        self.in_flight = 0
        self.max_in_flight = 0
        self.yield_during_send = False

    async def get_balance(self, pubkey, commitment=None):
        self.balance_queries += 1
        return SimpleNamespace(value=self.balance)

    async def get_latest_blockhash(self, commitment=None):
        return SimpleNamespace(value=SimpleNamespace(
            blockhash=Hash.new_unique(),
            last_valid_block_height=1000,
        ))

    async def get_fee_for_message(self, message, commitment=None):
        return SimpleNamespace(value=self.fee)

    async def send_raw_transaction(self, txn: bytes, opts=None):
        self.send_attempts += 1
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.yield_during_send:
                for _ in range(3):
                    await asyncio.sleep(0)
            error = self.send_errors.pop(0) if self.send_errors else None
            if error is not None:
                raise error

            tx = Transaction.from_bytes(txn)
            transfers = self._decode_transfers(tx)
            if self.fail_addresses & {address for address, _ in transfers}:
                raise RuntimeError("Transaction simulation failed: custom program error")

            self.balance -= sum(lamports for _, lamports in transfers) + (self.fee or 0)
            for address, lamports in transfers:
                self.credits[address] = self.credits.get(address, 0) + lamports
            self.landed.append(tx)
            return SimpleNamespace(value=tx.signatures[0])
        finally:
            self.in_flight -= 1

    async def confirm_transaction(self, signature, commitment=None, sleep_seconds=0.5,
                                  last_valid_block_height=None):
        error = self.confirm_errors.pop(0) if self.confirm_errors else None
        if error is not None:
            raise error
        return SimpleNamespace(value=[SimpleNamespace(err=None)])

    @staticmethod
    def _decode_transfers(tx: Transaction):
        keys = tx.message.account_keys
        transfers = []
        for ix in tx.message.instructions:
            data = bytes(ix.data)
            lamports = int.from_bytes(data[4:12], "little")
            recipient = str(keys[ix.accounts[1]])
            transfers.append((recipient, lamports))
        return transfers


@pytest.fixture
def ledger():
    return FakeLedger()


@pytest.fixture
def sender():
    return Keypair()


@pytest.fixture
def fast_settings():
    return DistributionSettings(
        batch_size=10,
        concurrent_batches=5,
        max_retries=3,
        retry_base_delay=0,
        group_cooldown=0,
    )


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no distribution variables set and no .env in the working directory."""
    for name in (
        'SOLANA_RPC_URL', 'SOLANA_NETWORK', 'EXPLORER_URL', 'SENDER_PRIVATE_KEY',
        'AMOUNT_PER_RECIPIENT', 'CSV_FILE', 'BATCH_SIZE', 'CONCURRENT_BATCHES',
        'MAX_RETRIES', 'RETRY_BASE_DELAY', 'GROUP_COOLDOWN', 'FEE_BUFFER_SOL',
        'TELEGRAM_BOT_TOKEN', 'TELEGRAM_ADMIN_CHAT_ID', 'DEBUG',
    ):
        # setenv first so anything load_dotenv writes is rolled back too
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    return tmp_path
