# File: beacon_ingest/scripts/resolve_beacons.py
"""Join beacon rows against the image index.

Columns 0-7 carry the scalar beacon fields verbatim; the layout names the
columns holding image names. Only matched images are kept, in column order.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Tuple

from beacon_ingest.scripts.errors import ParseError
from beacon_ingest.scripts.models import BEACON_FIELDS, BeaconRecord, ImageRecord, RawRow

UUID_COLUMN = 0
SITE_NAME_COLUMN = 2


@dataclass(frozen=True)
class BeaconLayout:
    image_columns: Tuple[int, ...] = (8, 9, 10, 11, 12)
    single_image: bool = False


DEFAULT_LAYOUT = BeaconLayout()
# Older sheet revision: one image per beacon, matched on the site name.
SITE_NAME_LAYOUT = BeaconLayout(image_columns=(SITE_NAME_COLUMN,), single_image=True)


@dataclass
class ResolveStats:
    rows: int = 0
    skipped_empty_uuid: int = 0
    unmatched_images: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "rows": self.rows,
            "skipped_empty_uuid": self.skipped_empty_uuid,
            "unmatched_images": self.unmatched_images,
        }


def _lookup_images(
    row: RawRow, index: Mapping[str, ImageRecord], layout: BeaconLayout, stats: ResolveStats
) -> Tuple[ImageRecord, ...]:
    images: List[ImageRecord] = []
    for col in layout.image_columns:
        if col >= len(row) or row[col] == "":
            continue
        match = index.get(row[col].upper())
        if match is None:
            stats.unmatched_images += 1
            continue
        images.append(match)
        if layout.single_image:
            break
    return tuple(images)


def resolve_beacons(
    rows: Iterable[RawRow],
    index: Mapping[str, ImageRecord],
    timestamp: str,
    layout: BeaconLayout = DEFAULT_LAYOUT,
    stats: ResolveStats | None = None,
) -> List[BeaconRecord]:
    stats = stats if stats is not None else ResolveStats()
    beacons: List[BeaconRecord] = []

    for i, row in enumerate(rows):
        stats.rows += 1
        if len(row) <= UUID_COLUMN or row[UUID_COLUMN] == "":
            stats.skipped_empty_uuid += 1
            continue
        if len(row) < len(BEACON_FIELDS):
            raise ParseError(f"Beacon row needs {len(BEACON_FIELDS)} core cells, got {len(row)}", row=i)

        scalars = {name: row[pos] for pos, name in enumerate(BEACON_FIELDS)}
        beacons.append(
            BeaconRecord(
                **scalars,
                images=_lookup_images(row, index, layout, stats),
                captured_at=timestamp,
            )
        )

    return beacons
