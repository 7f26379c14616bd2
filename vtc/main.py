import signal
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer
import yaml
from rich.console import Console

from vtc.config.loader import load_config
from vtc.config.models import AppConfig
from vtc.domain.errors import ValidationError
from vtc.infrastructure.event_bus import EventBus
from vtc.infrastructure.ffmpeg import FFmpegAdapter
from vtc.infrastructure.ffprobe import FFprobeAdapter
from vtc.infrastructure.file_scanner import FileScanner
from vtc.infrastructure.logging import batch_log_path, setup_logging
from vtc.infrastructure.platform import ExecutionEnvironment
from vtc.pipeline.coordinator import JobCoordinator
from vtc.pipeline.dispatcher import Dispatcher
from vtc.ui.summary import BatchSummary

DEFAULT_CONFIG_PATH = Path("conf/vtc.yaml")

transcode_app = typer.Typer(help="Transcode a single video file to a normalized x265 Matroska file.")
batch_app = typer.Typer(help="Transcode every video file under a directory, one at a time.")


def _load_app_config(config_path: Optional[Path], debug: bool) -> AppConfig:
    """Builds the configuration once; it is passed down from here."""
    try:
        if config_path is not None:
            config = load_config(config_path)
        elif DEFAULT_CONFIG_PATH.exists():
            config = load_config(DEFAULT_CONFIG_PATH)
        else:
            config = AppConfig()
    except FileNotFoundError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except (ValueError, yaml.YAMLError) as exc:
        typer.secho(f"Error: invalid config: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    if debug:
        config.general.debug = True
    return config


def build_coordinator(config: AppConfig) -> JobCoordinator:
    environment = ExecutionEnvironment.detect(config.platform)
    return JobCoordinator(
        config=config,
        prober=FFprobeAdapter(environment),
        transcoder=FFmpegAdapter(environment, config.encoder),
    )


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt


@contextmanager
def sigterm_as_interrupt() -> Iterator[None]:
    """Routes SIGTERM through the same cleanup path as Ctrl+C."""
    previous = signal.signal(signal.SIGTERM, _raise_interrupt)
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous)


@transcode_app.command()
def transcode(
    path: Optional[str] = typer.Argument(None, help="Video file to transcode"),
    force: bool = typer.Option(False, "--force", "-f", help="Force a file to transcode even if a lock file exists"),
    lower: bool = typer.Option(False, "--lower", "-l", help="Override default settings with a lower quality encode"),
    delete_original: bool = typer.Option(False, "--delete-original", "-d", help="Delete original video once encoding is complete"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging"),
):
    """Transcode one video file next to its source."""
    config = _load_app_config(config_path, debug)
    logger = setup_logging(debug=config.general.debug)

    try:
        coordinator = build_coordinator(config)
        with sigterm_as_interrupt():
            result = coordinator.run(
                path,
                force=force,
                lower_quality=lower,
                delete_original=delete_original,
            )
    except KeyboardInterrupt:
        typer.secho("\nTranscode interrupted, lock and temp file removed", fg=typer.colors.YELLOW)
        raise typer.Exit(code=130)
    except Exception as e:
        logger.exception(f"Fatal Error: {e}")
        raise typer.Exit(code=1)

    if not result.ok:
        raise typer.Exit(code=1)


@batch_app.command()
def batch_transcode(
    directory: Optional[str] = typer.Argument(None, help="Directory to scan recursively"),
    lower: bool = typer.Option(False, "--lower", "-l", help="Override default settings with a lower quality encode"),
    delete_original: bool = typer.Option(False, "--delete-original", "-d", help="Delete original video once encoding is complete"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="Path to YAML config"),
    debug: bool = typer.Option(False, "--debug/--no-debug", help="Enable verbose debug logging"),
):
    """Transcode every matching video under a directory; exits 1 if any file failed."""
    config = _load_app_config(config_path, debug)

    try:
        root = Dispatcher.validate_root(directory)
    except ValidationError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    log_file = batch_log_path(Path(config.general.log_dir), config.general.output_tag)
    logger = setup_logging(log_file, debug=config.general.debug)
    logger.info(
        f"VTC started: directory={root}, lower={lower}, delete_original={delete_original}, "
        f"extensions={','.join(config.general.extensions)}, tag={config.general.output_tag}"
    )

    bus = EventBus()
    summary = BatchSummary(bus)
    console = Console()

    try:
        dispatcher = Dispatcher(
            coordinator=build_coordinator(config),
            file_scanner=FileScanner(config.general.extensions, config.general.output_tag),
            event_bus=bus,
        )
        with sigterm_as_interrupt():
            dispatcher.run(root, lower_quality=lower, delete_original=delete_original)
    except KeyboardInterrupt:
        console.print(summary.render())
        typer.secho("\nBatch stopped by user", fg=typer.colors.YELLOW)
        raise typer.Exit(code=130)
    except ValidationError as exc:
        typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    except Exception as e:
        logger.exception(f"Fatal Error: {e}")
        raise typer.Exit(code=1)

    console.print(summary.render())
    if summary.failed_count:
        logger.warning(f"{summary.failed_count} file(s) failed to transcode")
        raise typer.Exit(code=1)


if __name__ == "__main__":
    transcode_app()
