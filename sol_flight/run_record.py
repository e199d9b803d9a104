import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Union

from .models import DistributionResult

logger = logging.getLogger(__name__)


def save_run_record(result: DistributionResult, sender: str, network: str,
                    log_dir: Union[str, Path] = "logs") -> Path:
    """Save the distribution summary to a timestamped JSON file"""
    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    record = result.to_dict()
    record.update({
        "status": "completed",
        "sender": sender,
        "network": network,
        "timestamp": datetime.now().isoformat(),
    })

    record_file = log_dir / f"distribution_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
    with open(record_file, 'w') as f:
        json.dump(record, f, indent=2)
    logger.info(f"Distribution record saved to {record_file}")
    return record_file
