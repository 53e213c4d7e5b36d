"""Run counters."""
import time
import logging
from collections import defaultdict
from typing import Dict

logger = logging.getLogger(__name__)


class Metrics:
    """Track what a run extracted and saved."""

    def __init__(self):
        self.start_time = time.time()
        self.counters: Dict[str, int] = defaultdict(int)

    def increment(self, key: str, amount: int = 1) -> None:
        """Increment a counter."""
        self.counters[key] += amount

    def elapsed(self) -> float:
        return time.time() - self.start_time

    def report(self) -> None:
        """Log current metrics."""
        logger.info(
            f"Orders: {self.counters.get('rows', 0)} | "
            f"Invoices: {self.counters.get('records', 0)} | "
            f"No invoice: {self.counters.get('rejected_status', 0)} | "
            f"Invalid: {self.counters.get('invalid', 0)} | "
            f"Saved: {self.counters.get('saved', 0)} | "
            f"Already known: {self.counters.get('duplicates', 0)}"
        )

    def get_summary(self) -> Dict:
        """Get summary statistics."""
        return {
            "rows": self.counters.get("rows", 0),
            "records": self.counters.get("records", 0),
            "rejected_status": self.counters.get("rejected_status", 0),
            "invalid": self.counters.get("invalid", 0),
            "saved": self.counters.get("saved", 0),
            "duplicates": self.counters.get("duplicates", 0),
            "without_file": self.counters.get("without_file", 0),
            "elapsed_seconds": round(self.elapsed(), 2),
        }
