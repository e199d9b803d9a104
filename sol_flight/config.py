import os
import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Optional, Union

from dotenv import find_dotenv, load_dotenv

from .models import ConfigurationError

logger = logging.getLogger(__name__)

# .env next to the project root, then the current working directory
DEFAULT_ENV_PATH = Path(__file__).parent.parent / '.env'

DEVNET_RPC = 'https://api.devnet.solana.com'


@dataclass
class NodeConfig:
    rpc_url: str = DEVNET_RPC
    network: str = 'devnet'  # cluster name used in explorer links
    explorer_url: str = 'https://solscan.io'

    def tx_url(self, signature: str) -> str:
        return f"{self.explorer_url.rstrip('/')}/tx/{signature}?cluster={self.network}"


@dataclass
class WalletConfig:
    # JSON array of secret key bytes, as written by sol-flight-keygen
    private_key: Optional[str] = None


@dataclass
class DistributionSettings:
    batch_size: int = 10
    concurrent_batches: int = 5
    max_retries: int = 3
    retry_base_delay: float = 1.0   # seconds, multiplied by the attempt number
    group_cooldown: float = 0.5     # seconds between concurrency groups
    fee_buffer_sol: Decimal = Decimal('0.01')

    def validate(self) -> bool:
        if self.batch_size <= 0:
            raise ConfigurationError("BATCH_SIZE must be greater than 0")
        if self.concurrent_batches <= 0:
            raise ConfigurationError("CONCURRENT_BATCHES must be greater than 0")
        if self.max_retries < 0:
            raise ConfigurationError("MAX_RETRIES cannot be negative")
        if self.retry_base_delay < 0 or self.group_cooldown < 0:
            raise ConfigurationError("Delays cannot be negative")
        if self.fee_buffer_sol < 0:
            raise ConfigurationError("FEE_BUFFER_SOL cannot be negative")
        return True


@dataclass
class TelegramConfig:
    bot_token: Optional[str] = None
    admin_chat_id: Optional[str] = None


@dataclass
class AppConfig:
    node: NodeConfig
    wallet: WalletConfig
    distribution: DistributionSettings
    telegram: TelegramConfig = field(default_factory=TelegramConfig)
    csv_file: str = './recipients.csv'
    amount_per_recipient: Optional[str] = None
    debug: bool = False


def _env_number(name: str, default: Union[int, float, Decimal], cast):
    raw = os.getenv(name)
    if raw is None or raw.strip() == '':
        return default
    try:
        return cast(raw.strip())
    except (ValueError, InvalidOperation):
        raise ConfigurationError(f"{name} must be a number, got '{raw}'")


def load_config(env_file: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Loads configuration from environment variables and .env files.

    An explicit env_file overrides values from the default .env; variables
    already present in the process environment win over the default file.
    """
    loaded_base = load_dotenv(dotenv_path=DEFAULT_ENV_PATH)
    if loaded_base:
        logger.info(f"Loaded base configuration from {DEFAULT_ENV_PATH}")
    else:
        load_dotenv(find_dotenv(usecwd=True))

    if env_file:
        if Path(env_file).exists():
            load_dotenv(dotenv_path=env_file, override=True)
            logger.info(f"Loaded and applied overrides from {env_file}")
        else:
            logger.warning(f"Environment file {env_file} not found. Using existing environment variables.")

    node_config = NodeConfig(
        rpc_url=os.getenv('SOLANA_RPC_URL', DEVNET_RPC),
        network=os.getenv('SOLANA_NETWORK', 'devnet'),
        explorer_url=os.getenv('EXPLORER_URL', 'https://solscan.io'),
    )

    wallet_config = WalletConfig(private_key=os.getenv('SENDER_PRIVATE_KEY'))

    distribution = DistributionSettings(
        batch_size=_env_number('BATCH_SIZE', DistributionSettings.batch_size, int),
        concurrent_batches=_env_number('CONCURRENT_BATCHES', DistributionSettings.concurrent_batches, int),
        max_retries=_env_number('MAX_RETRIES', DistributionSettings.max_retries, int),
        retry_base_delay=_env_number('RETRY_BASE_DELAY', DistributionSettings.retry_base_delay, float),
        group_cooldown=_env_number('GROUP_COOLDOWN', DistributionSettings.group_cooldown, float),
        fee_buffer_sol=_env_number('FEE_BUFFER_SOL', DistributionSettings.fee_buffer_sol, Decimal),
    )
    distribution.validate()

    telegram_config = TelegramConfig(
        bot_token=os.getenv('TELEGRAM_BOT_TOKEN'),
        admin_chat_id=os.getenv('TELEGRAM_ADMIN_CHAT_ID'),
    )

    app_config = AppConfig(
        node=node_config,
        wallet=wallet_config,
        distribution=distribution,
        telegram=telegram_config,
        csv_file=os.getenv('CSV_FILE', './recipients.csv'),
        amount_per_recipient=os.getenv('AMOUNT_PER_RECIPIENT'),
        debug=os.getenv('DEBUG', 'false').lower() == 'true',
    )

    if not app_config.node.rpc_url:
        raise ConfigurationError("SOLANA_RPC_URL is required.")

    logger.info(f"Configuration loaded. RPC: {node_config.rpc_url}, network: {node_config.network}")
    return app_config
