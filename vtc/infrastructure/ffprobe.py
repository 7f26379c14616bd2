import re
import subprocess
import logging
from pathlib import Path
from vtc.domain.errors import ProbeError
from vtc.domain.interfaces import IHeightProbe
from vtc.infrastructure.platform import ExecutionEnvironment

class FFprobeAdapter(IHeightProbe):
    """Wrapper around ffprobe to read the source height."""

    def __init__(self, environment: ExecutionEnvironment):
        self.environment = environment
        self.logger = logging.getLogger(__name__)

    def is_available(self) -> bool:
        return self.environment.is_resolvable(self.environment.ffprobe)

    @staticmethod
    def _parse_height(raw: str) -> int:
        # Only the first line belongs to stream v:0; strip everything but digits.
        first_line = raw.strip().splitlines()[0] if raw.strip() else ""
        digits = re.sub(r"[^0-9]", "", first_line)
        if not digits:
            raise ProbeError(f"ffprobe returned no height: {raw.strip()!r}")
        height = int(digits)
        if height <= 0:
            raise ProbeError(f"ffprobe returned an invalid height: {height}")
        return height

    def probe_height(self, path: Path) -> int:
        """Executes ffprobe for the first video stream's height."""
        try:
            target = self.environment.translate(path)
        except (OSError, subprocess.CalledProcessError) as e:
            raise ProbeError(f"Cannot translate path for ffprobe: {path} ({e})") from e

        cmd = [
            self.environment.ffprobe,
            "-v", "error",
            "-select_streams", "v:0",
            "-show_entries", "stream=height",
            "-of", "csv=p=0",
            target,
        ]
        self.logger.debug(f"FFPROBE_CMD: {' '.join(cmd)}")

        try:
            result = subprocess.run(cmd, capture_output=True, text=True)
        except OSError as e:
            raise ProbeError(f"ffprobe could not be started: {e}") from e

        if result.returncode != 0:
            raise ProbeError(f"ffprobe failed for {path}: {result.stderr.strip()}")

        return self._parse_height(result.stdout)
