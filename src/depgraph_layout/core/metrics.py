"""Performance metrics for the layout pipeline.

Tracks timing for each phase of one layout call:
- build: raw graph -> working nodes and links
- simulate: force simulation ticks
- normalize: rotation and centering
- index: imported-by / imports indexes
"""

import json
import time
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any

from loguru import logger


@dataclass
class PhaseMetrics:
    """Metrics for a single pipeline phase."""

    phase_name: str
    item_count: int = 0  # Nodes for build/simulate/normalize, edges for index
    duration_seconds: float = 0.0
    throughput: float = 0.0  # Items per second

    def calculate_throughput(self) -> None:
        """Calculate throughput from count and duration."""
        if self.duration_seconds > 0:
            self.throughput = self.item_count / self.duration_seconds
        else:
            self.throughput = 0.0


@dataclass
class LayoutMetrics:
    """Timing of every phase of one layout call."""

    build: PhaseMetrics = field(default_factory=lambda: PhaseMetrics("Build"))
    simulate: PhaseMetrics = field(default_factory=lambda: PhaseMetrics("Simulate"))
    normalize: PhaseMetrics = field(default_factory=lambda: PhaseMetrics("Normalize"))
    index: PhaseMetrics = field(default_factory=lambda: PhaseMetrics("Index"))

    total_duration_seconds: float = 0.0
    start_time: float = field(default_factory=time.perf_counter)

    def to_dict(self) -> dict[str, Any]:
        """Convert metrics to dictionary for JSON serialization."""
        return {
            "build": asdict(self.build),
            "simulate": asdict(self.simulate),
            "normalize": asdict(self.normalize),
            "index": asdict(self.index),
            "total_duration_seconds": self.total_duration_seconds,
        }

    def to_json(self) -> str:
        """Convert metrics to JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @contextmanager
    def phase(self, phase_name: str, item_count: int = 0) -> Iterator[PhaseMetrics]:
        """Context manager for tracking a phase.

        Args:
            phase_name: One of "build", "simulate", "normalize", "index"
            item_count: Items processed by the phase

        Yields:
            PhaseMetrics object to update during phase

        Example:
            with metrics.phase("simulate", len(nodes)):
                layout(nodes, links, width, height, size)
        """
        phase_map = {
            "build": self.build,
            "simulate": self.simulate,
            "normalize": self.normalize,
            "index": self.index,
        }

        if phase_name not in phase_map:
            logger.warning(f"Unknown phase: {phase_name}")
            yield PhaseMetrics(phase_name, item_count)
            return

        phase_metrics = phase_map[phase_name]
        phase_metrics.item_count = item_count
        start_time = time.perf_counter()

        try:
            yield phase_metrics
        finally:
            phase_metrics.duration_seconds = time.perf_counter() - start_time
            phase_metrics.calculate_throughput()
            logger.debug(
                f"{phase_metrics.phase_name}: {phase_metrics.item_count:,} items "
                f"in {phase_metrics.duration_seconds * 1000:.1f}ms"
            )

    def finalize(self) -> None:
        """Record the total duration since the metrics were created."""
        self.total_duration_seconds = time.perf_counter() - self.start_time

    def log_summary(self) -> None:
        """Print a formatted summary table to the console."""
        from rich.console import Console
        from rich.table import Table

        console = Console()

        table = Table(
            title="Layout Performance",
            show_header=True,
            header_style="bold cyan",
        )
        table.add_column("Phase", style="cyan", width=12)
        table.add_column("Items", justify="right", style="green", width=10)
        table.add_column("Time", justify="right", style="yellow", width=10)
        table.add_column("Throughput", justify="right", style="magenta", width=15)

        for phase_metrics in (self.build, self.simulate, self.normalize, self.index):
            table.add_row(
                phase_metrics.phase_name,
                f"{phase_metrics.item_count:,}",
                f"{phase_metrics.duration_seconds * 1000:.1f}ms",
                f"{phase_metrics.throughput:.1f}/s",
            )

        table.add_section()
        table.add_row(
            "[bold]Total[/bold]",
            "",
            f"[bold]{self.total_duration_seconds * 1000:.1f}ms[/bold]",
            "",
        )

        console.print(table)
