import asyncio
import logging
import time
from decimal import Decimal
from typing import List, Optional, Sequence

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.keypair import Keypair

from .address_validator import find_invalid_addresses
from .batching import chunk, make_batches
from .config import DistributionSettings, NodeConfig
from .models import (
    Batch, ConfigurationError, DistributionResult,
    EmptyRecipientListError, InsufficientBalanceError, InvalidAddressesError,
    RunState, SolFlightError, TransferOutcome, sol_to_lamports
)
from .transfer_submitter import TransferSubmitter
from .ui.console_ui import ConsoleUI


class SolDistributor:
    """
    Sends a fixed amount of SOL to every recipient.

    A run moves through INIT -> BALANCE_CHECKED -> VALIDATED -> BATCHED ->
    SUBMITTING -> SUMMARIZED. Empty input, a short balance or any invalid
    address moves it to ABORTED and raises before anything is submitted.
    """

    def __init__(self, client: AsyncClient, submitter: TransferSubmitter,
                 settings: Optional[DistributionSettings] = None,
                 node: Optional[NodeConfig] = None,
                 ui: Optional[ConsoleUI] = None):
        self.client = client
        self.submitter = submitter
        self.settings = settings or DistributionSettings()
        self.node = node or NodeConfig()
        self.ui = ui
        self.state = RunState.INIT
        self.logger = logging.getLogger(__name__)

    def _transition(self, state: RunState):
        self.logger.debug(f"State {self.state.name} -> {state.name}")
        self.state = state

    def _abort(self, error: SolFlightError):
        self.logger.error(f"Distribution aborted in state {self.state.name}: {error}")
        self._transition(RunState.ABORTED)
        raise error

    async def get_balance(self, sender: Keypair) -> int:
        resp = await self.client.get_balance(sender.pubkey(), Confirmed)
        return resp.value

    async def distribute(self, sender: Keypair, recipients: Sequence[str],
                         amount_per_recipient: Decimal) -> DistributionResult:
        """
        Run one distribution.

        Raises:
            EmptyRecipientListError, InsufficientBalanceError, InvalidAddressesError:
                the run was aborted before any transfer was sent
            ConfigurationError: the amount rounds down to zero lamports
        """
        self.state = RunState.INIT
        recipients = list(recipients)
        amount_per_recipient = Decimal(str(amount_per_recipient))
        lamports = sol_to_lamports(amount_per_recipient)
        if lamports <= 0:
            self._abort(ConfigurationError(
                f"Amount per recipient {amount_per_recipient} SOL is less than 1 lamport"
            ))

        self.logger.info(
            f"Starting distribution of {amount_per_recipient} SOL to {len(recipients)} recipients "
            f"(batch size {self.settings.batch_size}, {self.settings.concurrent_batches} concurrent)"
        )
        if not recipients:
            self._abort(EmptyRecipientListError())

        # Balance pre-check is a snapshot; it is not repeated per batch
        initial_balance = await self.get_balance(sender)
        required = lamports * len(recipients)
        buffer = sol_to_lamports(self.settings.fee_buffer_sol)
        self.logger.info(f"Sender balance: {initial_balance} lamports, required: {required} + {buffer} buffer")
        if self.ui:
            self.ui.display_balance(initial_balance, required)
        if initial_balance < required + buffer:
            self._abort(InsufficientBalanceError(initial_balance, required + buffer))
        self._transition(RunState.BALANCE_CHECKED)

        invalid = find_invalid_addresses(recipients)
        if invalid:
            if self.ui:
                self.ui.display_invalid_addresses(invalid)
            self._abort(InvalidAddressesError(invalid))
        self.logger.info("All addresses validated")
        self._transition(RunState.VALIDATED)

        batches = make_batches(recipients, self.settings.batch_size)
        self.logger.info(f"Created {len(batches)} batches")
        if self.ui:
            self.ui.display_parameters(
                recipient_count=len(recipients),
                amount_per_recipient=amount_per_recipient,
                batch_size=self.settings.batch_size,
                concurrent_batches=self.settings.concurrent_batches,
                batch_count=len(batches),
            )
        self._transition(RunState.BATCHED)

        result = DistributionResult(
            recipient_count=len(recipients),
            amount_per_recipient=amount_per_recipient,
            initial_balance_lamports=initial_balance,
            started_at=time.time(),
        )
        self._transition(RunState.SUBMITTING)
        await self._submit_all(sender, batches, amount_per_recipient, result)

        result.final_balance_lamports = await self.get_balance(sender)
        result.finished_at = time.time()
        self._transition(RunState.SUMMARIZED)
        self.logger.info(
            f"Distribution finished: {result.successful} successful, {result.failed} failed, "
            f"{result.total_transactions} transactions in {result.duration_seconds:.2f}s"
        )
        return result

    async def _submit_all(self, sender: Keypair, batches: List[Batch],
                          amount_per_recipient: Decimal, result: DistributionResult):
        groups = chunk(batches, self.settings.concurrent_batches)
        completed = 0

        for group_number, group in enumerate(groups):
            outcomes = await asyncio.gather(*(
                self._submit_batch(sender, batch, len(batches), amount_per_recipient)
                for batch in group
            ))

            # Aggregate only after the whole group has resolved
            for batch, outcome in zip(group, outcomes):
                self._record(result, batch, outcome)

            completed += len(group)
            self.logger.info(f"Progress: {completed}/{len(batches)} batches completed")
            if self.ui:
                self.ui.display_progress(completed, len(batches))

            if group_number < len(groups) - 1 and self.settings.group_cooldown > 0:
                await asyncio.sleep(self.settings.group_cooldown)

    async def _submit_batch(self, sender: Keypair, batch: Batch, total_batches: int,
                            amount_per_recipient: Decimal) -> TransferOutcome:
        label = f"Batch {batch.index + 1}/{total_batches}"
        self.logger.info(f"{label} ({len(batch)} recipients)")
        outcome = await self.submitter.submit(sender, batch.addresses, amount_per_recipient, label=label)
        if self.ui:
            url = self.node.tx_url(outcome.signature) if outcome.success else None
            self.ui.display_batch_result(batch, total_batches, outcome, url)
        return outcome

    def _record(self, result: DistributionResult, batch: Batch, outcome: TransferOutcome):
        if outcome.success:
            result.record_success(batch.index, outcome, self.node.tx_url(outcome.signature))
        else:
            result.record_failure(outcome)
