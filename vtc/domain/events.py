"""Domain events for the batch dispatch loop.

Events flow through the EventBus so the dispatcher stays unaware of who
aggregates or displays its progress.

See `infrastructure/event_bus.py` for the pub/sub mechanism.
"""

from pathlib import Path
from pydantic import BaseModel
from .models import JobResult


class Event(BaseModel):
    """Base class for all domain events."""

    pass


class DiscoveryStarted(Event):
    """Emitted when the directory scan begins."""

    directory: Path


class DiscoveryFinished(Event):
    """Emitted after enumeration; carries the number of matched files."""

    files_found: int


class JobStarted(Event):
    """Emitted right before the coordinator is invoked for a file."""

    source_path: Path


class JobEvent(Event):
    """Base class for events carrying a finished job's result."""

    result: JobResult


class JobCompleted(JobEvent):
    pass


class JobSkipped(JobEvent):
    pass


class JobFailed(JobEvent):
    pass


class BatchFinished(Event):
    """Emitted when every matched file has been dispatched."""

    directory: Path
    interrupted: bool = False
