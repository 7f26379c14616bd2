"""
End-to-end lifecycle tests: real lock files, real scanner and dispatcher,
fake probe/transcoder so no ffmpeg is needed.
"""
import pytest
from vtc.domain.models import JobStatus, TranscodeTarget
from vtc.infrastructure.claim import FileClaim
from vtc.infrastructure.event_bus import EventBus
from vtc.infrastructure.file_scanner import FileScanner
from vtc.pipeline.coordinator import JobCoordinator
from vtc.pipeline.dispatcher import Dispatcher
from vtc.ui.summary import BatchSummary


def build_dispatcher(config, probe, transcoder, bus):
    coordinator = JobCoordinator(config, probe, transcoder, claim=FileClaim())
    scanner = FileScanner(config.general.extensions, config.general.output_tag)
    return coordinator, Dispatcher(coordinator, scanner, bus)


def leftovers(directory):
    """Lock and temp files anywhere under ``directory``."""
    return sorted(
        p.name for p in directory.rglob("*")
        if p.name.endswith(".lock") or p.name.endswith(".tmp")
    )


@pytest.mark.integration
def test_batch_run_then_rerun_is_idempotent(sample_config, fake_probe, transcoder_factory,
                                            event_bus, test_input_dir, dummy_video_files):
    transcoder = transcoder_factory()
    _, dispatcher = build_dispatcher(sample_config, fake_probe, transcoder, event_bus)
    summary = BatchSummary(event_bus)

    assert dispatcher.run(test_input_dir) == 0

    assert (test_input_dir / "a.x265.mkv").exists()
    assert (test_input_dir / "d.x265.mkv").exists()
    assert (test_input_dir / "subdir" / "e.x265.mkv").exists()
    assert len(summary.completed) == 3
    assert leftovers(test_input_dir) == []

    # Second pass: outputs are never picked up, existing outputs skip their sources
    rerun_transcoder = transcoder_factory()
    rerun_bus = EventBus()
    _, rerun = build_dispatcher(sample_config, fake_probe, rerun_transcoder, rerun_bus)
    rerun_summary = BatchSummary(rerun_bus)

    assert rerun.run(test_input_dir) == 0
    assert rerun_transcoder.calls == []
    assert rerun_summary.files_found == 3
    assert len(rerun_summary.skipped) == 3


@pytest.mark.integration
def test_stale_lock_skipped_in_batch_then_forced(sample_config, fake_probe, transcoder_factory,
                                                 event_bus, test_input_dir, dummy_video_files):
    stale = TranscodeTarget(source_path=dummy_video_files["a.mp4"], output_tag="x265")
    stale.lock_path.write_text("")
    stale.temp_path.write_bytes(b"left over from a crash")

    transcoder = transcoder_factory()
    coordinator, dispatcher = build_dispatcher(sample_config, fake_probe, transcoder, event_bus)
    summary = BatchSummary(event_bus)

    assert dispatcher.run(test_input_dir) == 0
    assert [r.source_path.name for r in summary.skipped] == ["a.mp4"]
    assert not stale.output_path.exists()
    assert stale.lock_path.exists()

    result = coordinator.run(dummy_video_files["a.mp4"], force=True)

    assert result.status == JobStatus.SUCCEEDED
    assert stale.output_path.exists()
    assert leftovers(test_input_dir) == []


@pytest.mark.integration
def test_failed_file_leaves_no_trace_and_batch_continues(sample_config, probe_factory, transcoder_factory,
                                                         event_bus, test_input_dir, dummy_video_files):
    class FlakyTranscoder(transcoder_factory):
        def transcode(self, source_path, output_path, profile):
            self.fail = source_path.name == "d.AVI"
            super().transcode(source_path, output_path, profile)

    _, dispatcher = build_dispatcher(sample_config, probe_factory(height=2160), FlakyTranscoder(), event_bus)
    summary = BatchSummary(event_bus)

    assert dispatcher.run(test_input_dir, delete_original=True) == 1

    assert [r.source_path.name for r in summary.failed] == ["d.AVI"]
    assert dummy_video_files["d.AVI"].exists()
    assert not (test_input_dir / "d.x265.mkv").exists()
    # Successful files were replaced by their outputs
    assert not dummy_video_files["a.mp4"].exists()
    assert (test_input_dir / "a.x265.mkv").exists()
    assert summary.completed[0].profile.resolution_label == "uhd2160"
    assert leftovers(test_input_dir) == []


@pytest.mark.integration
def test_interrupted_batch_can_resume(sample_config, fake_probe, transcoder_factory,
                                      event_bus, test_input_dir, dummy_video_files):
    _, dispatcher = build_dispatcher(sample_config, fake_probe, transcoder_factory(interrupt=True), event_bus)

    with pytest.raises(KeyboardInterrupt):
        dispatcher.run(test_input_dir)
    assert leftovers(test_input_dir) == []

    resume_transcoder = transcoder_factory()
    _, resumed = build_dispatcher(sample_config, fake_probe, resume_transcoder, EventBus())

    assert resumed.run(test_input_dir) == 0
    assert len(resume_transcoder.calls) == 3
