"""Main CLI entry point for Video Relay."""

import asyncio
import sys
from pathlib import Path

import hydra
from omegaconf import DictConfig
from rich.console import Console
from rich.table import Table

from .config import AppConfig
from .errors import VideoRelayError
from .extractor import VideoRecord
from .pipeline import ExtractionPipeline
from .relay import FileSink, TempStorage, relay
from .server import run_server
from .utils.formatting import format_duration, human_readable_size
from .utils.log import configure_logging

console = Console()


@hydra.main(version_base=None, config_path="../../conf", config_name="config")
def main(cfg: DictConfig) -> None:
    """Main entry point."""
    config = AppConfig.from_dictconfig(cfg)
    configure_logging(config.logging.level, console=console)

    mode = cfg.get("mode", "serve")
    if mode == "serve":
        console.print("[bold blue]Video Relay[/bold blue]")
        console.print(f"  Temp directory: {config.temp_dir}")
        console.print(f"  Server: http://{config.server.host}:{config.server.port}")
        console.print()
        run_server(config)
        return

    url = cfg.get("url")
    try:
        if mode == "extract":
            asyncio.run(run_extract(config, url))
        elif mode == "download":
            asyncio.run(run_download(config, url, Path(cfg.get("output") or ".")))
        else:
            console.print(f"[red]Unknown mode: {mode}[/red] (expected serve, extract or download)")
            sys.exit(2)
    except VideoRelayError as e:
        console.print(f"[red]{type(e).__name__}:[/red] {e}")
        sys.exit(1)


async def run_extract(config: AppConfig, url: str) -> VideoRecord:
    """Extract one URL and print the record."""
    pipeline = ExtractionPipeline(
        timeout=config.extractor.timeout,
        user_agent=config.extractor.user_agent,
    )
    record = await pipeline.extract(url)
    show_record(record)
    return record


async def run_download(config: AppConfig, url: str, output_dir: Path) -> Path:
    """Extract one URL and relay its media into ``output_dir``."""
    storage = TempStorage(config.temp_dir)
    storage.ensure()

    pipeline = ExtractionPipeline(
        timeout=config.extractor.timeout,
        user_agent=config.extractor.user_agent,
    )
    plan = await pipeline.resolve_download(url)
    show_record(plan.record)

    destination = output_dir / plan.filename
    sink = FileSink(destination, storage, title=plan.record.title)

    with console.status(f"Downloading {plan.filename}..."):
        total = await relay(
            plan.locator,
            sink,
            referer=plan.referer,
            user_agent=config.extractor.user_agent,
            chunk_size=config.relay.chunk_size,
            connect_timeout=config.relay.connect_timeout,
            read_timeout=config.relay.read_timeout,
        )

    console.print(f"[green]Saved[/green] {destination} ({human_readable_size(total)})")
    return destination


def show_record(record: VideoRecord) -> None:
    """Display a VideoRecord."""
    table = Table(title=record.title)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Platform", record.platform)
    table.add_row("Author", record.author or "-")
    table.add_row("Duration", format_duration(record.duration_seconds))
    table.add_row("Thumbnail", record.thumbnail_url or "-")
    table.add_row("Video URL", record.primary_media_url or "[yellow]not found[/yellow]")

    console.print(table)

    if record.candidate_media_sources:
        sources_table = Table(title="Media Sources")
        sources_table.add_column("Quality", style="cyan")
        sources_table.add_column("Type")
        sources_table.add_column("URL", overflow="fold")

        for source in record.candidate_media_sources:
            sources_table.add_row(source.quality_label, source.mime_type, source.url)

        console.print(sources_table)


if __name__ == "__main__":
    main()
