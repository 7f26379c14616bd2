from abc import ABC, abstractmethod
from pathlib import Path
from .models import EncodingProfile


class IHeightProbe(ABC):
    """
    Contract for media introspection.
    Abstracts away the probe tool (ffprobe) from the coordination logic.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the probe executable can be resolved on this host."""

    @abstractmethod
    def probe_height(self, path: Path) -> int:
        """
        Returns the pixel height of the first video stream.

        Raises:
            ProbeError: If the probe fails or returns no usable height.
        """


class ITranscoder(ABC):
    """
    Contract for the transcoding engine.
    Implementations must write only to ``output_path`` and block until done.
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Whether the transcoder executable can be resolved on this host."""

    @abstractmethod
    def transcode(self, source_path: Path, output_path: Path, profile: EncodingProfile) -> None:
        """
        Encodes ``source_path`` into ``output_path`` using ``profile``.

        Raises:
            TranscodeError: If the transcoder exits non-zero or cannot start.
            KeyboardInterrupt: After terminating the child process.
        """


class ExclusiveClaim(ABC):
    """
    Advisory mutual exclusion keyed by a target's lock path.
    ``acquire`` must be an atomic create-if-absent.
    """

    @abstractmethod
    def acquire(self, key: Path) -> bool:
        """Claims ``key``; returns False if it is already held."""

    @abstractmethod
    def release(self, key: Path) -> None:
        """Releases ``key``; releasing an unheld key is a no-op."""

    @abstractmethod
    def is_held(self, key: Path) -> bool:
        """Whether ``key`` is currently claimed by anyone."""
