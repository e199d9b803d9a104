import json
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from solders.keypair import Keypair

from .models import ConfigurationError

logger = logging.getLogger(__name__)

SECRET_KEY_LENGTH = 64


def keypair_from_json(secret: Optional[str]) -> Keypair:
    """
    Build the sender keypair from a JSON array of secret key bytes,
    e.g. the SENDER_PRIVATE_KEY value written by sol-flight-keygen.
    """
    if not secret or not secret.strip():
        raise ConfigurationError("SENDER_PRIVATE_KEY not found in environment or .env file")

    try:
        key_bytes = json.loads(secret)
    except json.JSONDecodeError:
        raise ConfigurationError("Invalid SENDER_PRIVATE_KEY format. Expected JSON array of numbers.")

    if not isinstance(key_bytes, list) or not all(
        isinstance(b, int) and not isinstance(b, bool) and 0 <= b <= 255 for b in key_bytes
    ):
        raise ConfigurationError("Invalid SENDER_PRIVATE_KEY format. Expected JSON array of numbers.")
    if len(key_bytes) != SECRET_KEY_LENGTH:
        raise ConfigurationError(
            f"Invalid SENDER_PRIVATE_KEY length: expected {SECRET_KEY_LENGTH} bytes, got {len(key_bytes)}"
        )

    try:
        return Keypair.from_bytes(bytes(key_bytes))
    except ValueError as e:
        raise ConfigurationError(f"SENDER_PRIVATE_KEY is not a valid keypair: {e}")


def keypair_to_json(keypair: Keypair) -> List[int]:
    return list(bytes(keypair))


def generate_wallet(env_path: Union[str, Path] = '.env',
                    wallet_path: Union[str, Path] = 'wallet.json',
                    default_amount: str = '0.01') -> Tuple[Keypair, Path, Path]:
    """
    Generate a new sender keypair, write it to an env file and a JSON backup.

    The env file is overwritten with SENDER_PRIVATE_KEY and AMOUNT_PER_RECIPIENT.
    """
    keypair = Keypair()
    secret = keypair_to_json(keypair)

    env_path = Path(env_path)
    env_path.write_text(
        "# Sender wallet private key (as JSON array)\n"
        f"SENDER_PRIVATE_KEY={json.dumps(secret, separators=(',', ':'))}\n"
        "\n"
        "# Optional: Set default amount per recipient\n"
        f"AMOUNT_PER_RECIPIENT={default_amount}\n"
    )
    logger.info(f"Private key saved to {env_path}")

    wallet_path = Path(wallet_path)
    with open(wallet_path, 'w') as f:
        json.dump(secret, f, indent=2)
    logger.info(f"Private key backup saved to {wallet_path}")

    return keypair, env_path, wallet_path
