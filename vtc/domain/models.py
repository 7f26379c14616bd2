from enum import Enum
from pathlib import Path
from typing import Optional
from pydantic import BaseModel

OUTPUT_EXTENSION = ".mkv"

class JobStatus(str, Enum):
    SUCCEEDED = "SUCCEEDED"
    SKIPPED = "SKIPPED"
    FAILED = "FAILED"

class ResolutionBucket(str, Enum):
    UHD = "UHD"
    FHD = "FHD"
    HD = "HD"
    SD = "SD"

class EncodingProfile(BaseModel):
    bucket: ResolutionBucket
    resolution_label: str
    quality: int  # CRF-style: lower value = higher fidelity
    audio_bitrate_kbps: int

class TranscodeTarget(BaseModel):
    """One input file and the paths derived from it.

    For ``dir/name.ext`` and tag ``t`` the derived paths are ``dir/name.t.mkv``
    (output), ``dir/name.t.mkv.tmp`` (temp), ``dir/name.t.lock`` and
    ``dir/name.t.log``.
    """
    source_path: Path
    output_tag: str
    temp_suffix: str = ".tmp"

    @property
    def extension(self) -> str:
        return self.source_path.suffix.lstrip(".").lower()

    @property
    def base_name(self) -> str:
        return f"{self.source_path.with_suffix('')}.{self.output_tag}"

    @property
    def output_path(self) -> Path:
        return Path(f"{self.base_name}{OUTPUT_EXTENSION}")

    @property
    def temp_path(self) -> Path:
        return Path(f"{self.output_path}{self.temp_suffix}")

    @property
    def lock_path(self) -> Path:
        return Path(f"{self.base_name}.lock")

    @property
    def log_path(self) -> Path:
        return Path(f"{self.base_name}.log")

    def is_already_transcoded(self) -> bool:
        return self.output_tag in self.source_path.name

class JobResult(BaseModel):
    source_path: Path
    status: JobStatus
    reason: str = ""
    output_path: Optional[Path] = None
    profile: Optional[EncodingProfile] = None
    input_size_bytes: Optional[int] = None
    output_size_bytes: Optional[int] = None
    duration_seconds: Optional[float] = None

    @property
    def ok(self) -> bool:
        return self.status == JobStatus.SUCCEEDED
