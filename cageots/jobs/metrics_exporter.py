"""Metrics exporter for observability."""
import json
import time
from pathlib import Path
from typing import Any, Dict
import aiofiles

from cageots.config import DATA_DIR

METRICS_FILE = DATA_DIR / "metrics.jsonl"


class MetricsExporter:
    """Appends one JSON line per run."""

    def __init__(self, run_id: str, metrics_file: Path = METRICS_FILE):
        self.run_id = run_id
        self.metrics_file = metrics_file

    async def export_metrics(self, outcome: str, summary: Dict[str, Any]) -> None:
        """Export metrics to JSONL file."""
        metrics = {
            "ts": time.time(),
            "run_id": self.run_id,
            "outcome": outcome,
            **summary,
        }

        line = json.dumps(metrics) + "\n"
        async with aiofiles.open(self.metrics_file, "a") as f:
            await f.write(line)


def read_recent_metrics(metrics_file: Path = METRICS_FILE, limit: int = 20) -> list[dict]:
    """Last exported runs, newest last."""
    if not metrics_file.exists():
        return []
    with open(metrics_file, encoding="utf-8") as f:
        lines = [line for line in f if line.strip()]
    return [json.loads(line) for line in lines[-limit:]]
