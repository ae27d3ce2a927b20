# File: beacon_ingest/scripts/image_index.py
"""Image lookup table -> index keyed by uppercased image name."""
from __future__ import annotations

from typing import Dict, Iterable, List

from beacon_ingest.scripts.errors import ParseError
from beacon_ingest.scripts.models import ImageRecord, RawRow

ImageIndex = Dict[str, ImageRecord]

IMAGE_COLUMNS = ("id", "name", "src")


def normalize_name(name: str) -> str:
    return name.upper()


def build_image_index(rows: Iterable[RawRow]) -> ImageIndex:
    """Map NAME -> ImageRecord from (id, name, src) rows; later rows win on duplicate names.

    The stored record carries the uppercased name as well, so the JSON artifact
    and the resolved beacons show the same spelling as the key.
    """
    index: ImageIndex = {}
    for i, row in enumerate(rows):
        if len(row) < len(IMAGE_COLUMNS):
            raise ParseError(f"Image row needs {len(IMAGE_COLUMNS)} cells (id, name, src), got {len(row)}", row=i)
        image_id, name, src = row[0], row[1], row[2]
        key = normalize_name(name)
        index[key] = ImageRecord(id=image_id, name=key, src=src)
    return index


def image_records(index: ImageIndex) -> List[ImageRecord]:
    """All indexed images, sorted by name for stable output."""
    return [index[key] for key in sorted(index)]
