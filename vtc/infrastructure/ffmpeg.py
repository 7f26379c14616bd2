import subprocess
import logging
from pathlib import Path
from typing import List
from vtc.config.models import EncoderConfig
from vtc.domain.errors import TranscodeError
from vtc.domain.interfaces import ITranscoder
from vtc.domain.models import EncodingProfile
from vtc.infrastructure.platform import ExecutionEnvironment

class FFmpegAdapter(ITranscoder):
    """Wrapper around ffmpeg producing a Matroska file at a fixed preset."""

    def __init__(self, environment: ExecutionEnvironment, config: EncoderConfig):
        self.environment = environment
        self.config = config
        self.logger = logging.getLogger(__name__)

    def is_available(self) -> bool:
        return self.environment.is_resolvable(self.environment.ffmpeg)

    def _build_command(self, source_path: Path, output_path: Path, profile: EncodingProfile) -> List[str]:
        """Constructs the ffmpeg command line arguments."""
        cfg = self.config
        return [
            self.environment.ffmpeg,
            "-probesize", cfg.probe_size,
            "-analyzeduration", cfg.analyze_duration,
            "-i", self.environment.translate(source_path),
            # Output name ends in .tmp, so the container must be explicit
            "-f", cfg.container,
            "-s", profile.resolution_label,
            "-c:v", cfg.video_codec,
            "-preset", cfg.preset,
            "-crf", str(profile.quality),
            "-vf", cfg.deinterlace_filter,
            "-codec:a", cfg.audio_codec,
            "-b:a", f"{profile.audio_bitrate_kbps}k",
            "-async", "1",
            self.environment.translate(output_path),
        ]

    def _stop(self, process: subprocess.Popen):
        process.terminate()
        try:
            process.wait(timeout=3)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()

    def transcode(self, source_path: Path, output_path: Path, profile: EncodingProfile) -> None:
        """Runs ffmpeg to completion; no timeout is imposed."""
        try:
            cmd = self._build_command(source_path, output_path, profile)
        except (OSError, subprocess.CalledProcessError) as e:
            raise TranscodeError(f"Cannot translate paths for ffmpeg: {e}") from e

        self.logger.debug(f"FFMPEG_CMD: {' '.join(cmd)}")

        try:
            process = subprocess.Popen(cmd)
        except OSError as e:
            raise TranscodeError(f"ffmpeg could not be started: {e}") from e

        try:
            process.wait()
        except KeyboardInterrupt:
            self.logger.info(f"FFMPEG_INTERRUPTED: {source_path.name}")
            self._stop(process)
            raise

        if process.returncode != 0:
            raise TranscodeError(f"ffmpeg exited with code {process.returncode}")
