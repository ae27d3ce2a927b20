# File: beacon_ingest/scripts/cli.py
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List

import typer

from beacon_ingest.scripts.errors import BeaconIngestError, ConfigError, IoError
from beacon_ingest.scripts.export_artifacts import sha256_file, write_json, write_manifest
from beacon_ingest.scripts.fetch import fetch_all
from beacon_ingest.scripts.image_index import build_image_index, image_records
from beacon_ingest.scripts.read_table import parse_table
from beacon_ingest.scripts.resolve_beacons import ResolveStats, resolve_beacons
from beacon_ingest.scripts.settings import PipelineConfig, load_config

APP = typer.Typer(help="Tourist beacon sheet -> JSON pipeline.")

CONFIG_OPTION = typer.Option(
    None,
    "--config",
    envvar="BEACON_INGEST_CONFIG",
    help="Pipeline YAML (defaults to the packaged config/pipeline.yml)",
)


def capture_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _sources_meta(config: PipelineConfig) -> List[dict]:
    meta = []
    for key, source in (("beacons", config.beacons), ("images", config.images)):
        meta.append({
            "dataset": key,
            "url": source.url,
            "path": str(source.path),
            "sha256": sha256_file(source.path),
        })
    return meta


def fetch_sources(config: PipelineConfig, transport=None) -> List[Path]:
    try:
        config.local_dir.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise IoError(f"Cannot create {config.local_dir}: {exc}") from exc
    downloads = config.downloads
    typer.echo(f"Fetching {len(downloads)} file(s) into {config.local_dir}")
    paths = fetch_all(downloads, timeout=config.http_timeout, transport=transport)
    for path in paths:
        typer.echo(f"  {path}")
    return paths


def build_outputs(config: PipelineConfig, now: str | None = None) -> dict:
    """Parse the fetched tables, resolve beacons and write the JSON artifacts."""
    for source in (config.beacons, config.images):
        if not source.path.exists():
            raise IoError(f"Local table missing: {source.path} (run 'fetch' first)")

    image_rows = parse_table(config.images.path, config.images.header, config.images.sheet)
    index = build_image_index(image_rows)
    typer.echo(f"Indexed {len(index)} image(s) from {len(image_rows)} row(s)")

    exports: Dict[str, str] = {}
    if config.write_image_index:
        exports["images"] = str(write_json(image_records(index), config.outputs["images"]))

    captured_at = now or capture_timestamp()
    stats = ResolveStats()
    beacon_rows = parse_table(config.beacons.path, config.beacons.header, config.beacons.sheet)
    beacons = resolve_beacons(beacon_rows, index, captured_at, layout=config.layout, stats=stats)
    if stats.skipped_empty_uuid:
        typer.echo(f"[warn] Skipped {stats.skipped_empty_uuid} row(s) with an empty uuid", err=True)

    exports["beacons"] = str(write_json(beacons, config.outputs["beacons"]))
    typer.echo(f"Wrote {len(beacons)} beacon(s) -> {exports['beacons']}")

    counts = {
        "beacons": len(beacons),
        "images_indexed": len(index),
        **stats.as_dict(),
    }
    manifest = write_manifest(
        config.outputs["manifest"],
        captured_at=captured_at,
        counts=counts,
        sources=_sources_meta(config),
        exports=exports,
    )
    manifest["manifest_path"] = str(config.outputs["manifest"])
    return manifest


def run_pipeline(config: PipelineConfig, now: str | None = None, transport=None) -> dict:
    fetch_sources(config, transport=transport)
    return build_outputs(config, now=now)


def _load(ctx: typer.Context, config_path: str | None) -> PipelineConfig:
    # a --config given before the subcommand applies unless the subcommand sets its own
    path = config_path or (ctx.obj or {}).get("config")
    try:
        return load_config(path)
    except ConfigError as exc:
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=2)


@APP.callback(invoke_without_command=True)
def main(ctx: typer.Context, config: str = CONFIG_OPTION):
    """With no subcommand, run the full pipeline."""
    ctx.obj = {"config": config}
    if ctx.invoked_subcommand is None:
        cmd_run(ctx, None)


@APP.command("run")
def cmd_run(ctx: typer.Context, config: str = CONFIG_OPTION):
    """Download both tables and write the beacon JSON."""
    conf = _load(ctx, config)
    try:
        manifest = run_pipeline(conf)
    except BeaconIngestError as exc:
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=1)

    typer.echo("Files downloaded and JSON generated successfully.")
    typer.echo(json.dumps(manifest, indent=2))


@APP.command("fetch")
def cmd_fetch(ctx: typer.Context, config: str = CONFIG_OPTION):
    """Download the configured files only."""
    conf = _load(ctx, config)
    try:
        fetch_sources(conf)
    except BeaconIngestError as exc:
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo("Files downloaded.")


@APP.command("build")
def cmd_build(ctx: typer.Context, config: str = CONFIG_OPTION):
    """Rebuild the JSON artifacts from already-fetched local files."""
    conf = _load(ctx, config)
    try:
        manifest = build_outputs(conf)
    except BeaconIngestError as exc:
        typer.echo(f"[error] {exc}", err=True)
        raise typer.Exit(code=1)
    typer.echo(json.dumps(manifest, indent=2))


@APP.command("show-config")
def cmd_show_config(ctx: typer.Context, config: str = CONFIG_OPTION):
    """Print the effective pipeline config as JSON."""
    conf = _load(ctx, config)
    typer.echo(json.dumps(conf.to_dict(), indent=2))


if __name__ == "__main__":
    APP()
