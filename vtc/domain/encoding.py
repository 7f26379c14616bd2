from typing import Dict, NamedTuple
from .models import EncodingProfile, ResolutionBucket

class _BucketSettings(NamedTuple):
    label: str
    quality: int
    audio_kbps: int
    lower_quality: int
    lower_audio_kbps: int

# SD keeps 128 kbps even for lower-quality encodes.
BUCKET_SETTINGS: Dict[ResolutionBucket, _BucketSettings] = {
    ResolutionBucket.UHD: _BucketSettings("uhd2160", 25, 640, 30, 192),
    ResolutionBucket.FHD: _BucketSettings("hd1080", 22, 640, 26, 192),
    ResolutionBucket.HD: _BucketSettings("hd720", 21, 192, 26, 128),
    ResolutionBucket.SD: _BucketSettings("hd480", 22, 128, 27, 128),
}

def bucket_for_height(height: int) -> ResolutionBucket:
    if height >= 2000:
        return ResolutionBucket.UHD
    if height >= 1000:
        return ResolutionBucket.FHD
    if height >= 700:
        return ResolutionBucket.HD
    return ResolutionBucket.SD

def derive_profile(height: int, lower_quality: bool = False) -> EncodingProfile:
    """Maps a source pixel height to the target resolution, CRF and audio bitrate."""
    bucket = bucket_for_height(height)
    settings = BUCKET_SETTINGS[bucket]
    if lower_quality:
        quality, audio_kbps = settings.lower_quality, settings.lower_audio_kbps
    else:
        quality, audio_kbps = settings.quality, settings.audio_kbps
    return EncodingProfile(
        bucket=bucket,
        resolution_label=settings.label,
        quality=quality,
        audio_bitrate_kbps=audio_kbps,
    )
