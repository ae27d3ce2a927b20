# File: beacon_ingest/scripts/export_artifacts.py
from __future__ import annotations

import json
from hashlib import sha256
from pathlib import Path
from typing import Any, Dict, List, Sequence

from beacon_ingest.scripts.errors import IoError, ParseError, SerializationError
from beacon_ingest.scripts.models import BeaconRecord


def _ensure_parent(path: Path):
    path.parent.mkdir(parents=True, exist_ok=True)


def _plain(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def write_json(value: Any, path: str | Path) -> Path:
    """Pretty-print records (or plain data) to path, replacing any previous file."""
    path = Path(path)
    try:
        text = json.dumps(_plain(value), indent=2, ensure_ascii=False)
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"Cannot encode {path.name}: {exc}") from exc
    try:
        _ensure_parent(path)
        with open(path, "w", encoding="utf-8") as out:
            out.write(text)
            out.write("\n")
    except OSError as exc:
        raise IoError(f"Cannot write {path}: {exc}") from exc
    return path


def load_beacons(path: str | Path) -> List[BeaconRecord]:
    path = Path(path)
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as exc:
        raise IoError(f"Cannot read {path}: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise ParseError(f"Invalid beacon JSON: {exc}", path=str(path)) from exc
    try:
        return [BeaconRecord.from_dict(item) for item in data]
    except (KeyError, TypeError) as exc:
        raise ParseError(f"Beacon JSON entry missing field {exc}", path=str(path)) from exc


def sha256_file(path: Path) -> str:
    h = sha256()
    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(1024 * 1024), b""):
                h.update(chunk)
    except OSError as exc:
        raise IoError(f"Cannot read {path}: {exc}") from exc
    return h.hexdigest()


def write_manifest(
    path: str | Path,
    captured_at: str,
    counts: Dict[str, int],
    sources: Sequence[dict],
    exports: Dict[str, str],
) -> dict:
    manifest = {
        "schema_version": "1.0.0",
        "captured_at": captured_at,
        "counts": counts,
        "sources": list(sources),
        "exports": exports,
    }
    write_json(manifest, path)
    return manifest
