from typing import List
import logging

import pandas as pd

from .models import ConfigurationError

logger = logging.getLogger(__name__)


class RecipientManager:
    """Manages different ways to create recipient lists"""

    @staticmethod
    def from_csv(file_path: str) -> List[str]:
        """Load recipient addresses from a CSV file with an 'address' header."""
        logger.info(f"Loading recipients from CSV: {file_path}")
        try:
            # Read every cell as text so nothing is coerced or dropped silently
            df = pd.read_csv(file_path, dtype=str, keep_default_na=False, skip_blank_lines=True)
        except FileNotFoundError:
            logger.error(f"CSV file not found: {file_path}")
            raise ConfigurationError(f"Recipients file not found: {file_path}")
        except pd.errors.EmptyDataError:
            raise ConfigurationError(f"Recipients file is empty: {file_path}")
        except pd.errors.ParserError as e:
            logger.error(f"Error reading CSV file {file_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not parse recipients file {file_path}: {e}")

        df.columns = [str(c).strip() for c in df.columns]
        if 'address' not in df.columns:
            raise ConfigurationError("CSV file must contain an 'address' column.")

        recipients = [
            address.strip()
            for address in df['address']
            if isinstance(address, str) and address.strip()
        ]
        logger.info(f"Loaded {len(recipients)} recipients from {file_path}")
        return recipients
