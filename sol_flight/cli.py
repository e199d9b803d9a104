#!/usr/bin/env python3
"""
SOL Flight command line entry points.

Usage:
    sol-flight [amount] [--csv-file recipients.csv] [--rpc-url URL] [--debug]
    sol-flight-keygen [--env-file .env] [--wallet-file wallet.json]

The amount per recipient falls back to AMOUNT_PER_RECIPIENT from the
environment or .env file.
"""

import argparse
import asyncio
import logging
import sys
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Sequence

from solana.rpc.async_api import AsyncClient
from solana.rpc.commitment import Confirmed
from solders.keypair import Keypair

from . import __version__
from .config import AppConfig, load_config
from .distribution import SolDistributor
from .models import ConfigurationError, DistributionAborted, DistributionResult, sol_to_lamports
from .recipient_manager import RecipientManager
from .run_record import save_run_record
from .telegram_notifier import TelegramNotifier
from .transfer_submitter import TransferSubmitter
from .ui.console_ui import ConsoleUI
from .wallet import generate_wallet, keypair_from_json

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130


def setup_logging(verbose: bool) -> logging.Logger:
    """Configure logging with appropriate level and format."""
    level = logging.DEBUG if verbose else logging.INFO

    if verbose:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s')
    else:
        formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    root_logger.addHandler(console_handler)

    # HTTP client noise
    for name in ('httpx', 'httpcore', 'urllib3', 'requests'):
        logging.getLogger(name).setLevel(logging.WARNING)

    logger = logging.getLogger('sol_flight')
    if verbose:
        logger.debug("Debug logging enabled")
    return logger


def parse_amount(raw: Optional[str]) -> Decimal:
    """Parse a positive SOL amount, raising ConfigurationError otherwise."""
    if raw is None or not str(raw).strip():
        raise ConfigurationError("Please provide a valid amount")
    try:
        amount = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ConfigurationError(f"Please provide a valid amount, got '{raw}'")
    if not amount.is_finite() or amount <= 0:
        raise ConfigurationError(f"Amount must be greater than 0, got '{raw}'")
    if sol_to_lamports(amount) <= 0:
        raise ConfigurationError(f"Amount must be at least 1 lamport (0.000000001 SOL), got '{raw}'")
    return amount


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='sol-flight',
        description='Distribute a fixed amount of SOL to every address in a CSV file.',
        epilog='Example: sol-flight 0.1 --csv-file recipients.csv',
    )
    parser.add_argument('amount', nargs='?', help='Amount of SOL per recipient (default: AMOUNT_PER_RECIPIENT)')
    parser.add_argument('--csv-file', help='Recipients CSV with an "address" header (default: CSV_FILE or ./recipients.csv)')
    parser.add_argument('--rpc-url', help='Solana RPC endpoint (default: SOLANA_RPC_URL or devnet)')
    parser.add_argument('--network', help='Cluster name used in explorer links (default: SOLANA_NETWORK or devnet)')
    parser.add_argument('--env-file', help='Additional environment file whose values override .env')
    parser.add_argument('--batch-size', type=int, help='Recipients per transaction')
    parser.add_argument('--concurrency', type=int, help='Batches submitted in parallel')
    parser.add_argument('--max-retries', type=int, help='Retries per failed batch')
    parser.add_argument('--record-dir', default='logs', help='Directory for the JSON run record (default: logs)')
    parser.add_argument('--no-record', action='store_true', help='Do not write a JSON run record')
    parser.add_argument('--debug', action='store_true', help='Enable debug logging')
    parser.add_argument('--version', action='version', version=f'sol-flight {__version__}')
    return parser.parse_args(argv)


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Command line flags win over environment settings."""
    if args.rpc_url:
        config.node.rpc_url = args.rpc_url
    if args.network:
        config.node.network = args.network
    if args.csv_file:
        config.csv_file = args.csv_file
    if args.batch_size is not None:
        config.distribution.batch_size = args.batch_size
    if args.concurrency is not None:
        config.distribution.concurrent_batches = args.concurrency
    if args.max_retries is not None:
        config.distribution.max_retries = args.max_retries
    config.distribution.validate()
    return config


async def run_distribution(config: AppConfig, sender: Keypair, recipients: List[str],
                           amount: Decimal, ui: Optional[ConsoleUI] = None) -> DistributionResult:
    """Open an RPC connection and run one distribution."""
    async with AsyncClient(config.node.rpc_url, commitment=Confirmed) as client:
        submitter = TransferSubmitter(
            client,
            max_retries=config.distribution.max_retries,
            retry_base_delay=config.distribution.retry_base_delay,
        )
        distributor = SolDistributor(client, submitter, config.distribution, config.node, ui)
        return await distributor.distribute(sender, recipients, amount)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the distribution CLI."""
    args = parse_args(argv)
    logger = setup_logging(args.debug)
    ui = ConsoleUI()
    notifier = None

    try:
        config = apply_overrides(load_config(args.env_file), args)
        if config.debug and not args.debug:
            logger = setup_logging(True)

        amount = parse_amount(args.amount if args.amount is not None else config.amount_per_recipient)
        sender = keypair_from_json(config.wallet.private_key)
        logger.info(f"Wallet loaded: {sender.pubkey()}")

        recipients = RecipientManager.from_csv(config.csv_file)
        if not recipients:
            raise ConfigurationError(f"No recipients found in CSV file: {config.csv_file}")

        ui.display_welcome(str(sender.pubkey()), config.node.network, config.node.rpc_url)
        notifier = TelegramNotifier(config.telegram)
        notifier.notify_distribution_start(len(recipients), amount, config.node.network)

        result = asyncio.run(run_distribution(config, sender, recipients, amount, ui))

    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        ui.display_error(str(e))
        ui.console.print("Usage: sol-flight <amount_in_SOL>   (or set AMOUNT_PER_RECIPIENT in .env)")
        return EXIT_FAILURE
    except DistributionAborted as e:
        ui.display_error(str(e))
        if notifier:
            notifier.notify_distribution_failed(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        logger.warning("Interrupted by user")
        ui.console.print("\n[bold red]Interrupted - batches already confirmed are not reverted[/]")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        ui.display_error(str(e))
        if notifier:
            notifier.notify_distribution_failed(str(e))
        return EXIT_FAILURE

    ui.display_summary(result)
    if not args.no_record:
        try:
            save_run_record(result, str(sender.pubkey()), config.node.network, args.record_dir)
        except OSError as e:
            logger.error(f"Failed to save distribution record: {e}")
    notifier.notify_distribution_result(result)
    ui.console.print("[bold green]Distribution completed![/]")
    return EXIT_OK


def keygen_main(argv: Optional[Sequence[str]] = None) -> int:
    """Generate a sender wallet and store its key in an env file."""
    parser = argparse.ArgumentParser(
        prog='sol-flight-keygen',
        description='Generate a new sender wallet for SOL Flight.',
    )
    parser.add_argument('--env-file', default='.env', help='Env file to write SENDER_PRIVATE_KEY to (default: .env)')
    parser.add_argument('--wallet-file', default='wallet.json', help='JSON backup of the key (default: wallet.json)')
    parser.add_argument('--amount', default='0.01', help='Default AMOUNT_PER_RECIPIENT to write (default: 0.01)')
    parser.add_argument('--network', default='devnet', help='Cluster used in the funding instructions')
    args = parser.parse_args(argv)

    setup_logging(False)
    ui = ConsoleUI()
    try:
        parse_amount(args.amount)
        keypair, env_path, wallet_path = generate_wallet(args.env_file, args.wallet_file, args.amount)
    except (ConfigurationError, OSError) as e:
        ui.display_error(str(e))
        return EXIT_FAILURE

    ui.display_wallet_created(str(keypair.pubkey()), str(env_path), str(wallet_path), args.network)
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
