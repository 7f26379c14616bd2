"""Single-file transcode lifecycle.

Validating → Locking → Probing → Transcoding → Finalizing → Done, with an
aborting path from every state after the lock is taken. The lock (an
ExclusiveClaim keyed by the target's lock path) is acquired before any probe,
transcode or destructive step and released on every exit path:

- success: after the temp output was renamed and the original optionally deleted
- probe/transcode failure or interruption: after the temp output was removed
- finalize failure: temp output is kept for inspection, the lock is still
  released so the file can be retried
"""

import os
import logging
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from vtc.config.models import AppConfig
from vtc.domain.encoding import derive_profile
from vtc.domain.errors import (
    ContentionError,
    FinalizeError,
    ProbeError,
    TranscodeError,
    ValidationError,
)
from vtc.domain.interfaces import ExclusiveClaim, IHeightProbe, ITranscoder
from vtc.domain.models import EncodingProfile, JobResult, JobStatus, TranscodeTarget
from vtc.infrastructure.claim import FileClaim
from vtc.infrastructure.logging import job_log
from vtc.utils.formatting import format_duration, format_size


class JobCoordinator:
    """Runs the full lifecycle for one input file and reports a JobResult.

    Nothing raised while processing a file escapes ``run``: lifecycle errors
    and unexpected exceptions both become a FAILED result, logged to the
    per-file log. Only ``KeyboardInterrupt`` is propagated (after cleanup) so
    callers can stop.

    Args:
        config: AppConfig built once at process entry.
        prober: Height probe strategy (ffprobe).
        transcoder: Transcoder strategy (ffmpeg).
        claim: Lock implementation; defaults to lock files on disk.
    """

    def __init__(
        self,
        config: AppConfig,
        prober: IHeightProbe,
        transcoder: ITranscoder,
        claim: Optional[ExclusiveClaim] = None,
    ):
        self.config = config
        self.prober = prober
        self.transcoder = transcoder
        self.claim = claim or FileClaim()
        self.logger = logging.getLogger(__name__)

    def prepare(self, source: Union[str, Path, None]) -> TranscodeTarget:
        """Validating state: builds the target or raises ValidationError."""
        if source is None or not str(source).strip():
            raise ValidationError("Must provide a file to transcode.")

        general = self.config.general
        target = TranscodeTarget(
            source_path=Path(source),
            output_tag=general.output_tag,
            temp_suffix=general.temp_suffix,
        )
        path = target.source_path

        if target.extension not in general.extensions:
            raise ValidationError(f"{path} is not a valid video type.")
        if not path.is_file():
            raise ValidationError(f"{path} does not exist.")
        if target.is_already_transcoded() or target.output_path == path:
            raise ValidationError(f"{path} is already transcoded (name contains '{general.output_tag}').")
        if not self.transcoder.is_available():
            raise ValidationError("ffmpeg could not be found.")
        if not self.prober.is_available():
            raise ValidationError("ffprobe could not be found.")
        return target

    def _clear_stale(self, target: TranscodeTarget):
        try:
            if self.claim.is_held(target.lock_path):
                self.logger.warning(f"Force: removing existing lock {target.lock_path}")
            self.claim.release(target.lock_path)
            if target.temp_path.exists():
                self.logger.warning(f"Force: removing existing temp file {target.temp_path}")
                target.temp_path.unlink()
        except OSError as e:
            raise ContentionError(f"Cannot clear stale lock/temp for {target.source_path}: {e}") from e

    def _check_contention(self, target: TranscodeTarget):
        if self.claim.is_held(target.lock_path):
            raise ContentionError(f"Lock file {target.lock_path} already exists, transcode in progress elsewhere")
        if target.output_path.exists():
            raise ContentionError(f"Output {target.output_path} already exists")
        if target.temp_path.exists():
            raise ContentionError(f"Temp file {target.temp_path} already exists (use --force to clear it)")

    def _discard_temp(self, target: TranscodeTarget):
        try:
            target.temp_path.unlink(missing_ok=True)
        except OSError as e:
            self.logger.warning(f"Failed to remove temp file {target.temp_path}: {e}")

    def _release(self, target: TranscodeTarget):
        try:
            self.claim.release(target.lock_path)
        except OSError as e:
            self.logger.error(f"Failed to remove lock file {target.lock_path}: {e}")

    def _abort(self, target: TranscodeTarget, keep_temp: bool = False):
        if not keep_temp:
            self._discard_temp(target)
        self._release(target)

    @contextmanager
    def _claimed(self, target: TranscodeTarget, force: bool) -> Iterator[None]:
        """Locking state plus guaranteed release on every exit path.

        The cleanup block is armed before the claim is attempted, so an
        interrupt landing right after the lock file was created still removes it.
        """
        if force:
            self._clear_stale(target)
        self._check_contention(target)

        acquired = False
        try:
            acquired = self.claim.acquire(target.lock_path)
            if not acquired:
                raise ContentionError(f"Lock file {target.lock_path} was created by another process")
            self.logger.debug(f"Lock acquired: {target.lock_path}")
            yield
        except FinalizeError:
            # State is ambiguous: keep whatever temp output exists, unblock retries.
            if acquired:
                self._abort(target, keep_temp=True)
            raise
        except KeyboardInterrupt:
            if acquired:
                self.logger.error("Interrupted, cleaning up")
                self._abort(target)
            raise
        except BaseException:
            if acquired:
                self._abort(target)
            raise
        else:
            try:
                self.claim.release(target.lock_path)
            except OSError as e:
                raise FinalizeError(f"Failed to remove lock file {target.lock_path}: {e}") from e

    def _finalize(self, target: TranscodeTarget, delete_original: bool):
        if not target.temp_path.exists():
            raise FinalizeError(f"Transcoder succeeded but {target.temp_path} is missing")
        try:
            os.replace(target.temp_path, target.output_path)
        except OSError as e:
            raise FinalizeError(f"Failed to move transcoded file {target.temp_path}: {e}") from e

        if delete_original:
            self.logger.info(f"Delete original file: {target.source_path}")
            try:
                target.source_path.unlink()
            except OSError as e:
                raise FinalizeError(f"Failed to remove original file {target.source_path}: {e}") from e

    def _execute(self, target: TranscodeTarget, lower_quality: bool, delete_original: bool) -> EncodingProfile:
        height = self.prober.probe_height(target.source_path)
        profile = derive_profile(height, lower_quality)
        self.logger.info(
            f"Source height {height}px -> {profile.resolution_label} "
            f"(quality={profile.quality}, audio={profile.audio_bitrate_kbps}k)"
        )

        self.logger.info(f"Transcoding {target.source_path} to {target.temp_path}")
        self.transcoder.transcode(target.source_path, target.temp_path, profile)

        self._finalize(target, delete_original)
        return profile

    def run(
        self,
        source: Union[str, Path, None],
        force: bool = False,
        lower_quality: bool = False,
        delete_original: bool = False,
    ) -> JobResult:
        start_time = time.monotonic()
        try:
            target = self.prepare(source)
        except ValidationError as e:
            self.logger.error(str(e))
            return JobResult(source_path=Path(str(source or "")), status=JobStatus.FAILED, reason=str(e))

        input_size = None
        try:
            with job_log(target.log_path):
                try:
                    input_size = target.source_path.stat().st_size
                    with self._claimed(target, force):
                        profile = self._execute(target, lower_quality, delete_original)
                    output_size = target.output_path.stat().st_size
                except ContentionError:
                    raise
                except (ProbeError, TranscodeError, FinalizeError) as e:
                    self.logger.error(f"{type(e).__name__}: {e}")
                    self.logger.info("Done")
                    return self._failed(target, str(e), input_size, start_time)
                except Exception as e:
                    self.logger.exception(f"Exception processing {target.source_path.name}: {e}")
                    self.logger.info("Done")
                    return self._failed(target, f"Exception: {e}", input_size, start_time)

                elapsed = time.monotonic() - start_time
                self.logger.info(
                    f"[{format_size(input_size)} -> {format_size(output_size)}] - [{format_duration(elapsed)}]"
                )
                self.logger.info("Finished transcode")
                self.logger.info("Done")
                return JobResult(
                    source_path=target.source_path,
                    status=JobStatus.SUCCEEDED,
                    output_path=target.output_path,
                    profile=profile,
                    input_size_bytes=input_size,
                    output_size_bytes=output_size,
                    duration_seconds=elapsed,
                )
        except ContentionError as e:
            # Logged outside job_log: a skipped run leaves no trace on disk.
            self.logger.warning(f"Skipped {target.source_path}: {e}")
            return JobResult(source_path=target.source_path, status=JobStatus.SKIPPED, reason=str(e))

    @staticmethod
    def _failed(target: TranscodeTarget, reason: str, input_size: Optional[int], start_time: float) -> JobResult:
        return JobResult(
            source_path=target.source_path,
            status=JobStatus.FAILED,
            reason=reason,
            input_size_bytes=input_size,
            duration_seconds=time.monotonic() - start_time,
        )
