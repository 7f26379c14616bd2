"""Directory-level dispatch loop.

Enumerates candidate files under a root and hands them, one at a time, to the
JobCoordinator. A file's failure never stops the scan; a KeyboardInterrupt
does, after the running job cleaned up after itself.
"""

import logging
from pathlib import Path
from typing import Union

from vtc.domain.errors import ValidationError
from vtc.domain.events import (
    BatchFinished,
    DiscoveryFinished,
    DiscoveryStarted,
    JobCompleted,
    JobFailed,
    JobSkipped,
    JobStarted,
)
from vtc.domain.models import JobResult, JobStatus
from vtc.infrastructure.event_bus import EventBus
from vtc.infrastructure.file_scanner import FileScanner
from vtc.pipeline.coordinator import JobCoordinator


class Dispatcher:
    """Sequentially transcodes every matching file under a directory.

    Args:
        coordinator: JobCoordinator invoked once per file.
        file_scanner: FileScanner deciding which files are candidates.
        event_bus: EventBus receiving per-job lifecycle events.
    """

    def __init__(self, coordinator: JobCoordinator, file_scanner: FileScanner, event_bus: EventBus):
        self.coordinator = coordinator
        self.file_scanner = file_scanner
        self.event_bus = event_bus
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def validate_root(root_dir: Union[str, Path, None]) -> Path:
        if root_dir is None or not str(root_dir).strip():
            raise ValidationError("Must provide a directory to transcode.")
        path = Path(root_dir)
        if not path.is_dir():
            raise ValidationError(f"{path} does not exist.")
        return path

    def _publish_result(self, result: JobResult):
        if result.status == JobStatus.SUCCEEDED:
            self.event_bus.publish(JobCompleted(result=result))
        elif result.status == JobStatus.SKIPPED:
            self.event_bus.publish(JobSkipped(result=result))
        else:
            self.event_bus.publish(JobFailed(result=result))

    def _dispatch(self, file_path: Path, lower_quality: bool, delete_original: bool) -> JobResult:
        try:
            return self.coordinator.run(
                file_path,
                force=False,
                lower_quality=lower_quality,
                delete_original=delete_original,
            )
        except Exception as e:
            # Log exception but keep scanning
            self.logger.error(f"Exception processing {file_path.name}: {e}")
            return JobResult(source_path=file_path, status=JobStatus.FAILED, reason=f"Exception: {e}")

    def run(self, root_dir: Union[str, Path, None], lower_quality: bool = False, delete_original: bool = False) -> int:
        """Dispatches every match; returns the number of failed jobs."""
        directory = self.validate_root(root_dir)

        self.logger.info(f"Scanning directory: {directory}")
        self.event_bus.publish(DiscoveryStarted(directory=directory))
        files = list(self.file_scanner.scan(directory))
        self.event_bus.publish(DiscoveryFinished(files_found=len(files)))
        self.logger.info(f"Found {len(files)} file(s) to transcode")

        failed = 0
        try:
            for file_path in files:
                self.logger.info(f"Start transcoding video: {file_path}")
                self.event_bus.publish(JobStarted(source_path=file_path))

                result = self._dispatch(file_path, lower_quality, delete_original)
                self._publish_result(result)
                if result.status == JobStatus.FAILED:
                    failed += 1

                self.logger.info(f"Done encoding video: {file_path} ({result.status.value})")
        except KeyboardInterrupt:
            self.logger.error("Interrupted, stopping batch")
            self.event_bus.publish(BatchFinished(directory=directory, interrupted=True))
            raise

        self.logger.info("Done")
        self.event_bus.publish(BatchFinished(directory=directory))
        return failed
