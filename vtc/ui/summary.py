from pathlib import Path
from typing import List, Optional

from rich.box import ROUNDED
from rich.table import Table

from vtc.domain.events import (
    BatchFinished, DiscoveryFinished, DiscoveryStarted, JobEvent,
)
from vtc.domain.models import JobResult, JobStatus
from vtc.infrastructure.event_bus import EventBus
from vtc.utils.formatting import format_duration, format_size

class BatchSummary:
    """Subscribes to EventBus and tallies the outcome of a batch run."""

    def __init__(self, bus: EventBus):
        self.bus = bus
        self.directory: Optional[Path] = None
        self.files_found = 0
        self.completed: List[JobResult] = []
        self.skipped: List[JobResult] = []
        self.failed: List[JobResult] = []
        self.interrupted = False
        self._setup_subscriptions()

    def _setup_subscriptions(self):
        self.bus.subscribe(DiscoveryStarted, self.on_discovery_started)
        self.bus.subscribe(DiscoveryFinished, self.on_discovery_finished)
        self.bus.subscribe(JobEvent, self.on_job_finished)
        self.bus.subscribe(BatchFinished, self.on_batch_finished)

    def on_discovery_started(self, event: DiscoveryStarted):
        self.directory = event.directory

    def on_discovery_finished(self, event: DiscoveryFinished):
        self.files_found = event.files_found

    def on_job_finished(self, event: JobEvent):
        by_status = {
            JobStatus.SUCCEEDED: self.completed,
            JobStatus.SKIPPED: self.skipped,
            JobStatus.FAILED: self.failed,
        }
        by_status[event.result.status].append(event.result)

    def on_batch_finished(self, event: BatchFinished):
        self.interrupted = event.interrupted

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def bytes_saved(self) -> int:
        return sum(
            (r.input_size_bytes or 0) - (r.output_size_bytes or 0)
            for r in self.completed
        )

    def render(self) -> Table:
        title = f"Batch summary: {self.directory}" if self.directory else "Batch summary"
        if self.interrupted:
            title += " (interrupted)"
        table = Table(title=title, box=ROUNDED)
        table.add_column("File")
        table.add_column("Status")
        table.add_column("Size")
        table.add_column("Time", justify="right")
        table.add_column("Reason")

        for result in self.completed:
            size = f"{format_size(result.input_size_bytes or 0)} -> {format_size(result.output_size_bytes or 0)}"
            table.add_row(result.source_path.name, "[green]done[/]", size, format_duration(result.duration_seconds or 0), "")
        for result in self.skipped:
            table.add_row(result.source_path.name, "[yellow]skipped[/]", "", "", result.reason)
        for result in self.failed:
            table.add_row(result.source_path.name, "[red]failed[/]", "", "", result.reason)

        table.caption = (
            f"found={self.files_found} done={len(self.completed)} skipped={len(self.skipped)} "
            f"failed={self.failed_count} saved={format_size(max(self.bytes_saved, 0))}"
        )
        return table
