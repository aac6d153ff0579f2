import csv
import os
import resource
import sys
import time
from contextlib import contextmanager
from typing import Callable, Dict, Optional

import psutil


class PhaseMetrics:
    # One row per run; phase columns hold wall time in seconds
    CSV_FIELDS = [
        "Outcome",
        "Plan Confirm Wait (s)",
        "Planning Time (s)",
        "Execute Confirm Wait (s)",
        "Execution Time (s)",
        "Waypoints",
        "Total Time (s)",
        "Memory Consumed (MB)",
    ]

    PHASE_COLUMNS = {
        "plan_confirm": "Plan Confirm Wait (s)",
        "planning": "Planning Time (s)",
        "execute_confirm": "Execute Confirm Wait (s)",
        "execution": "Execution Time (s)",
    }

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._started_at = clock()
        self.phase_times_s: Dict[str, float] = {}
        self.waypoints = 0
        self.outcome = "unknown"

    @contextmanager
    def phase(self, name: str):
        if name not in self.PHASE_COLUMNS:
            raise KeyError(f"Unknown phase: {name}")
        start = self._clock()
        try:
            yield
        finally:
            self.phase_times_s[name] = self.phase_times_s.get(name, 0.0) + (self._clock() - start)

    def record_plan(self, waypoints: int):
        self.waypoints = int(waypoints)

    def record_outcome(self, outcome: str):
        self.outcome = outcome

    def compute_row(self) -> Dict[str, object]:
        row: Dict[str, object] = {
            "Outcome": self.outcome,
            "Waypoints": self.waypoints,
            "Total Time (s)": float(self._clock() - self._started_at),
            "Memory Consumed (MB)": self._get_process_memory_mb(),
        }
        for phase, column in self.PHASE_COLUMNS.items():
            row[column] = float(self.phase_times_s.get(phase, 0.0))
        return row

    def write_row(self, csv_path: Optional[str]) -> Optional[Dict[str, object]]:
        if not csv_path:
            return None
        row = self.compute_row()
        os.makedirs(os.path.dirname(csv_path) or ".", exist_ok=True)
        file_exists = os.path.exists(csv_path) and os.path.getsize(csv_path) > 0
        with open(csv_path, mode="a", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=self.CSV_FIELDS)
            if not file_exists:
                writer.writeheader()
            writer.writerow(row)
        return row

    def _get_process_memory_mb(self) -> float:
        try:
            process = psutil.Process(os.getpid())
            return process.memory_info().rss / (1024.0 * 1024.0)
        except psutil.Error:
            usage = resource.getrusage(resource.RUSAGE_SELF)
            if sys.platform == "darwin":
                return usage.ru_maxrss / (1024.0 * 1024.0)
            return usage.ru_maxrss / 1024.0
