from typing import List, Literal, Optional
from pydantic import BaseModel, Field, field_validator

DEFAULT_EXTENSIONS = ["mp4", "mkv", "avi", "mov", "m4v", "wmv", "mpg", "mpeg", "ts", "flv", "webm"]

class GeneralConfig(BaseModel):
    extensions: List[str] = Field(default_factory=lambda: list(DEFAULT_EXTENSIONS))
    output_tag: str = "transcoded"
    temp_suffix: str = ".tmp"
    log_dir: str = "logs"
    debug: bool = False

    @field_validator('extensions')
    @classmethod
    def normalize_extensions(cls, v: List[str]) -> List[str]:
        normalized = [ext.strip().lstrip(".").lower() for ext in v if ext.strip().lstrip(".")]
        if not normalized:
            raise ValueError("At least one input extension must be configured.")
        return normalized

    @field_validator('output_tag')
    @classmethod
    def validate_output_tag(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("output_tag must not be empty")
        if any(ch in v for ch in "./\\"):
            raise ValueError(f"output_tag must not contain dots or path separators: {v!r}")
        return v

    @field_validator('temp_suffix')
    @classmethod
    def validate_temp_suffix(cls, v: str) -> str:
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"temp_suffix must look like '.tmp', got {v!r}")
        return v

class EncoderConfig(BaseModel):
    """Fixed ffmpeg parameters shared by every job."""
    video_codec: str = "libx265"
    audio_codec: str = "libfdk_aac"
    preset: str = "veryfast"
    deinterlace_filter: str = "yadif"
    container: str = "matroska"
    probe_size: str = "1500M"
    analyze_duration: str = "1000M"

class PlatformConfig(BaseModel):
    """Which executables run the probe/transcode and how paths are spelled for them."""
    mode: Literal["auto", "native", "wsl"] = "auto"
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    # Holds ffmpeg.exe / ffprobe.exe under WSL. A relative value read from a
    # config file is resolved against that file; the built-in default against the cwd.
    windows_bin_dir: Optional[str] = "bin"

class AppConfig(BaseModel):
    general: GeneralConfig = Field(default_factory=GeneralConfig)
    encoder: EncoderConfig = Field(default_factory=EncoderConfig)
    platform: PlatformConfig = Field(default_factory=PlatformConfig)
