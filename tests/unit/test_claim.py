import pytest
from pathlib import Path
from unittest.mock import patch
from vtc.infrastructure.claim import FileClaim, InMemoryClaim

@pytest.fixture(params=["file", "memory"])
def claim(request):
    return FileClaim() if request.param == "file" else InMemoryClaim()

def test_acquire_is_exclusive(claim, tmp_path):
    key = tmp_path / "movie.x265.lock"
    assert claim.acquire(key) is True
    assert claim.is_held(key)
    assert claim.acquire(key) is False

def test_release_allows_reacquire(claim, tmp_path):
    key = tmp_path / "movie.x265.lock"
    claim.acquire(key)
    claim.release(key)
    assert not claim.is_held(key)
    assert claim.acquire(key) is True

def test_release_unheld_is_noop(claim, tmp_path):
    claim.release(tmp_path / "never.lock")

def test_keys_are_independent(claim, tmp_path):
    assert claim.acquire(tmp_path / "a.lock")
    assert claim.acquire(tmp_path / "b.lock")

def test_file_claim_creates_empty_marker(tmp_path):
    key = tmp_path / "movie.x265.lock"
    FileClaim().acquire(key)
    assert key.exists()
    assert key.read_bytes() == b""

def test_file_claim_respects_foreign_marker(tmp_path):
    key = tmp_path / "movie.x265.lock"
    key.write_text("created by another process")
    claim = FileClaim()
    assert claim.is_held(key)
    assert claim.acquire(key) is False
    assert key.read_text() == "created by another process"

def test_file_claim_release_propagates_permission_errors(tmp_path):
    key = tmp_path / "movie.x265.lock"
    FileClaim().acquire(key)
    with patch.object(Path, "unlink", side_effect=PermissionError("denied")):
        with pytest.raises(OSError):
            FileClaim().release(key)
