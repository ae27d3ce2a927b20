# File: beacon_ingest/scripts/settings.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml

from beacon_ingest.scripts.errors import ConfigError
from beacon_ingest.scripts.resolve_beacons import DEFAULT_LAYOUT, BeaconLayout

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "config" / "pipeline.yml"
SOURCE_KEYS = ("beacons", "images")
OUTPUT_KEYS = ("beacons", "images", "manifest")


@dataclass(frozen=True)
class Source:
    url: str
    path: Path
    header: bool = False
    sheet: str | None = None


@dataclass(frozen=True)
class Download:
    url: str
    path: Path


@dataclass(frozen=True)
class PipelineConfig:
    beacons: Source
    images: Source
    outputs: Dict[str, Path]
    local_dir: Path = Path("tmp")
    http_timeout: float = 30.0
    write_image_index: bool = True
    layout: BeaconLayout = DEFAULT_LAYOUT
    extra_downloads: List[Download] = field(default_factory=list)

    @property
    def downloads(self) -> List[Download]:
        """Every file the fetch stage writes, sources first."""
        return [
            Download(self.beacons.url, self.beacons.path),
            Download(self.images.url, self.images.path),
            *self.extra_downloads,
        ]

    def to_dict(self) -> Dict[str, Any]:
        return json_ready(asdict(self))


def json_ready(value: Any) -> Any:
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, dict):
        return {k: json_ready(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_ready(v) for v in value]
    return value


def _require(conf: dict, key: str, where: str) -> Any:
    value = conf.get(key)
    if value in (None, ""):
        raise ConfigError(f"Missing '{key}' in {where}")
    return value


def _source(conf: dict, key: str) -> Source:
    cfg = conf.get(key)
    if not isinstance(cfg, dict):
        raise ConfigError(f"Missing source '{key}'. Expected keys: {', '.join(SOURCE_KEYS)}")
    where = f"sources.{key}"
    return Source(
        url=str(_require(cfg, "url", where)),
        path=Path(_require(cfg, "path", where)),
        header=bool(cfg.get("header", False)),
        sheet=cfg.get("sheet"),
    )


def _layout(conf: dict | None) -> BeaconLayout:
    if not conf:
        return DEFAULT_LAYOUT
    columns = conf.get("image_columns", list(DEFAULT_LAYOUT.image_columns))
    try:
        columns = tuple(int(c) for c in columns)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"layout.image_columns must be a list of integers: {exc}") from exc
    return BeaconLayout(image_columns=columns, single_image=bool(conf.get("single_image", False)))


def parse_config(conf: dict) -> PipelineConfig:
    if not isinstance(conf, dict):
        raise ConfigError("Pipeline config must be a mapping")

    sources = conf.get("sources") or {}
    outputs_conf = conf.get("outputs") or {}
    outputs = {key: Path(_require(outputs_conf, key, "outputs")) for key in OUTPUT_KEYS}

    extras = []
    for i, item in enumerate(conf.get("extra_downloads") or []):
        if not isinstance(item, dict):
            raise ConfigError(f"extra_downloads[{i}] must be a mapping with url and path")
        where = f"extra_downloads[{i}]"
        extras.append(Download(str(_require(item, "url", where)), Path(_require(item, "path", where))))

    try:
        timeout = float(conf.get("http_timeout", 30))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"http_timeout must be a number: {exc}") from exc
    if timeout <= 0:
        raise ConfigError("http_timeout must be positive")

    return PipelineConfig(
        beacons=_source(sources, "beacons"),
        images=_source(sources, "images"),
        outputs=outputs,
        local_dir=Path(conf.get("local_dir") or "tmp"),
        http_timeout=timeout,
        write_image_index=bool(conf.get("write_image_index", True)),
        layout=_layout(conf.get("layout")),
        extra_downloads=extras,
    )


def load_config(path: str | Path | None = None) -> PipelineConfig:
    """Load the pipeline config YAML; defaults to the packaged pipeline.yml."""
    config_path = Path(path) if path else DEFAULT_CONFIG
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            conf = yaml.safe_load(f) or {}
    except OSError as exc:
        raise ConfigError(f"Cannot read config {config_path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {config_path}: {exc}") from exc
    return parse_config(conf)
