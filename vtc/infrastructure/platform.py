"""Execution environment: which ffmpeg/ffprobe to run and how to spell paths for them.

Under WSL the native Windows executables are much faster than the Linux
builds, so they are used instead; every path handed to them must then be in
Windows syntax (``wslpath -w``).
"""

import logging
import shutil
import subprocess
from pathlib import Path, PureWindowsPath
from typing import Optional

from vtc.config.models import PlatformConfig

logger = logging.getLogger(__name__)


def is_wsl(proc_version: Path = Path("/proc/version")) -> bool:
    """Check if running in Windows Subsystem for Linux."""
    try:
        return "microsoft" in proc_version.read_text().lower()
    except OSError:
        return False


class ExecutionEnvironment:
    """Resolves tool executables and translates paths for them."""

    def __init__(self, ffmpeg: str, ffprobe: str, wsl: bool = False):
        self.ffmpeg = ffmpeg
        self.ffprobe = ffprobe
        self.wsl = wsl

    @classmethod
    def detect(cls, config: PlatformConfig, proc_version: Optional[Path] = None) -> "ExecutionEnvironment":
        if config.mode == "wsl":
            wsl = True
        elif config.mode == "native":
            wsl = False
        else:
            wsl = is_wsl(proc_version) if proc_version else is_wsl()

        if wsl:
            bin_dir = Path(config.windows_bin_dir or ".")
            env = cls(str(bin_dir / "ffmpeg.exe"), str(bin_dir / "ffprobe.exe"), wsl=True)
        else:
            env = cls(config.ffmpeg_binary, config.ffprobe_binary, wsl=False)
        logger.debug(f"Execution environment: wsl={env.wsl}, ffmpeg={env.ffmpeg}, ffprobe={env.ffprobe}")
        return env

    def is_resolvable(self, executable: str) -> bool:
        if self.wsl:
            return Path(executable).is_file()
        return shutil.which(executable) is not None

    def translate(self, path: Path) -> str:
        """Returns ``path`` in the syntax the tools expect.

        The parent directory is translated and the file name re-joined, so the
        file itself does not need to exist yet (temp outputs).
        """
        if not self.wsl:
            return str(path)
        path = Path(path).absolute()
        result = subprocess.run(
            ["wslpath", "-w", str(path.parent)],
            capture_output=True,
            text=True,
            check=True,
        )
        return str(PureWindowsPath(result.stdout.strip()) / path.name)
