import pytest
import yaml
from pathlib import Path
from vtc.config.models import AppConfig
from vtc.domain.errors import ProbeError, TranscodeError
from vtc.domain.interfaces import IHeightProbe, ITranscoder
from vtc.infrastructure.claim import InMemoryClaim
from vtc.infrastructure.event_bus import EventBus

# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def sample_config():
    """Returns a sample AppConfig object for testing."""
    return AppConfig(
        general={
            "extensions": ["mp4", "mkv", "avi"],
            "output_tag": "x265",
            "temp_suffix": ".tmp",
            "log_dir": "logs",
            "debug": False,
        },
        platform={"mode": "native"},
    )

@pytest.fixture
def config_yaml_path(tmp_path):
    """Creates a temporary YAML config file."""
    conf_dir = tmp_path / "conf"
    conf_dir.mkdir()
    conf_file = conf_dir / "vtc.yaml"

    content = {
        'general': {
            'extensions': ['.MP4', 'mov'],
            'output_tag': 'hevc',
            'log_dir': str(tmp_path / "logs"),
        },
        'encoder': {
            'audio_codec': 'aac',
        },
        'platform': {
            'mode': 'native',
        },
    }

    with open(conf_file, 'w') as f:
        yaml.dump(content, f)

    return conf_file

# ============================================================================
# Collaborator doubles
# ============================================================================

class FakeProbe(IHeightProbe):
    """Returns a fixed height, or raises ProbeError when height is None."""

    def __init__(self, height=1080, available=True):
        self.height = height
        self.available = available
        self.calls = []

    def is_available(self) -> bool:
        return self.available

    def probe_height(self, path: Path) -> int:
        self.calls.append(path)
        if self.height is None:
            raise ProbeError(f"no height for {path}")
        return self.height


class FakeTranscoder(ITranscoder):
    """Writes a small file to the output path, or fails / raises on request."""

    def __init__(self, fail=False, interrupt=False, payload=b"encoded" * 10, available=True):
        self.fail = fail
        self.interrupt = interrupt
        self.payload = payload
        self.available = available
        self.calls = []

    def is_available(self) -> bool:
        return self.available

    def transcode(self, source_path, output_path, profile) -> None:
        self.calls.append((source_path, output_path, profile))
        # Partial output is on disk before any failure
        Path(output_path).write_bytes(self.payload)
        if self.interrupt:
            raise KeyboardInterrupt
        if self.fail:
            raise TranscodeError("ffmpeg exited with code 1")


@pytest.fixture
def fake_probe():
    return FakeProbe()

@pytest.fixture
def fake_transcoder():
    return FakeTranscoder()

@pytest.fixture
def probe_factory():
    return FakeProbe

@pytest.fixture
def transcoder_factory():
    return FakeTranscoder

@pytest.fixture
def memory_claim():
    return InMemoryClaim()

# ============================================================================
# EventBus Fixtures
# ============================================================================

@pytest.fixture
def event_bus():
    """Returns a fresh EventBus instance."""
    return EventBus()

# ============================================================================
# File System Fixtures
# ============================================================================

@pytest.fixture
def test_input_dir(tmp_path):
    """Creates a test input directory."""
    input_dir = tmp_path / "input"
    input_dir.mkdir()
    return input_dir

@pytest.fixture
def source_video(test_input_dir):
    """A dummy movie.mp4 in the input directory."""
    f = test_input_dir / "movie.mp4"
    f.write_bytes(b"dummy video content " * 100)  # ~2KB
    return f

@pytest.fixture
def dummy_video_files(test_input_dir):
    """Creates a mix of candidates, converted outputs and unsupported files."""
    files = {}
    for name in ["a.mp4", "b.mkv.x265.mkv", "c.txt", "d.AVI"]:
        f = test_input_dir / name
        f.write_bytes(b"dummy video content " * 100)
        files[name] = f

    subdir = test_input_dir / "subdir"
    subdir.mkdir()
    f = subdir / "e.mkv"
    f.write_bytes(b"dummy video content " * 100)
    files["subdir/e.mkv"] = f

    return files


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "slow: marks tests that run the real ffmpeg binaries"
    )
