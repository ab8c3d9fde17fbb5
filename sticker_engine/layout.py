"""
Sticker Layout Engine

Scatters decorative stickers across the viewport on a shuffled, jittered
grid while keeping clear of protected UI regions.

A placement pass is a pure function of its inputs plus the random source:
no state is retained between calls.
"""

import math
import random
import logging
from typing import List, Optional, Sequence, Tuple
from dataclasses import dataclass

from .config import StickerLayoutConfig
from .geometry import Viewport, Zone, box_around


@dataclass(frozen=True)
class StickerItem:
    """A decorative asset with an outbound link"""
    id: int
    image: str
    link: Optional[str] = None


@dataclass(frozen=True)
class PlacedItem:
    """
    A sticker positioned for one placement pass.

    x_pct/y_pct are the top-left anchor; width_pct/height_pct are the
    scaled footprint in viewport percentages. The accepted center point
    is kept as-is so collision checks can be repeated exactly.
    """
    item: StickerItem
    x_pct: float
    y_pct: float
    rotation_deg: float
    scale: float
    width_pct: float
    height_pct: float
    center_x_pct: float
    center_y_pct: float

    @property
    def bounds(self) -> Zone:
        return box_around(self.center_x_pct, self.center_y_pct,
                          self.width_pct, self.height_pct)

    def to_dict(self) -> dict:
        """Renderer payload"""
        return {
            'id': self.item.id,
            'image': self.item.image,
            'link': self.item.link,
            'left': f"{self.x_pct}%",
            'top': f"{self.y_pct}%",
            'leftVal': self.x_pct,
            'topVal': self.y_pct,
            'rotation': self.rotation_deg,
            'scale': self.scale,
        }


def target_count(viewport: Viewport, config: StickerLayoutConfig) -> int:
    """Number of sticker slots for this viewport, scaled linearly with area"""
    ratio = viewport.area / config.reference_area
    count = max(config.min_count, math.floor(config.base_count * ratio))
    return min(config.max_count, count)


def base_scale(viewport: Viewport, config: StickerLayoutConfig) -> float:
    """Sticker scale before per-item jitter"""
    ratio = viewport.area / config.reference_area
    return max(config.min_scale, min(config.max_scale, ratio * config.scale_gain))


def grid_shape(count: int, aspect_ratio: float) -> Tuple[int, int]:
    """(rows, cols) with rows * cols >= count, cells roughly square on screen"""
    if count <= 0:
        return 0, 0
    rows = max(1, math.ceil(math.sqrt(count / aspect_ratio)))
    cols = math.ceil(count / rows)
    return rows, cols


def shuffled_cells(rows: int, cols: int, rng: random.Random) -> List[Tuple[int, int]]:
    """All (row, col) cells in uniformly random order"""
    cells = [(row, col) for row in range(rows) for col in range(cols)]
    rng.shuffle(cells)
    return cells


def _blocked(cx: float, cy: float, width_pct: float, height_pct: float,
             exclusion_zones: Sequence[Zone], safe_zone: Optional[Zone]) -> bool:
    if not (0 <= cx <= 100 and 0 <= cy <= 100):
        return True
    if safe_zone is not None and safe_zone.contains(cx, cy):
        return True
    box = box_around(cx, cy, width_pct, height_pct)
    return any(box.overlaps(zone) for zone in exclusion_zones)


def compute_layout(items: Sequence[StickerItem],
                   viewport: Viewport,
                   exclusion_zones: Sequence[Zone] = (),
                   safe_zone: Optional[Zone] = None,
                   config: Optional[StickerLayoutConfig] = None,
                   rng: Optional[random.Random] = None) -> List[PlacedItem]:
    """
    Run one placement pass.

    Args:
        items: Sticker catalog, reused cyclically when shorter than the slot count
        viewport: Current viewport in pixels (finite, positive)
        exclusion_zones: Rectangles no sticker footprint may overlap
        safe_zone: Rectangle no sticker center may fall in (None on mobile)
        config: Layout configuration, defaults to StickerLayoutConfig()
        rng: Random source; pass a seeded random.Random for reproducible output

    Returns:
        Placed stickers, at most target_count(viewport, config) of them.
        Slots that find no free cell are dropped.
    """
    if not items:
        return []

    config = config or StickerLayoutConfig()
    rng = rng or random.Random()

    count = target_count(viewport, config)
    scale_base = base_scale(viewport, config)
    rows, cols = grid_shape(count, viewport.aspect_ratio)
    cells = shuffled_cells(rows, cols, rng)
    cell_w = 100 / cols if cols else 0.0
    cell_h = 100 / rows if rows else 0.0

    logging.debug(f"Layout pass: {viewport.width}x{viewport.height}, "
                  f"{count} slots on a {rows}x{cols} grid, base scale {scale_base:.2f}")

    placed: List[PlacedItem] = []
    cursor = 0

    for i in range(count):
        if cursor >= len(cells):
            break

        item = items[i % len(items)]
        scale = scale_base * rng.uniform(1 - config.scale_jitter, 1 + config.scale_jitter)
        rotation = rng.uniform(-config.max_rotation_deg, config.max_rotation_deg)
        width_pct = config.item_width_px * scale / viewport.width * 100
        height_pct = config.item_height_px * scale / viewport.height * 100

        while cursor < len(cells):
            row, col = cells[cursor]
            cursor += 1
            cx = (col + 0.5) * cell_w + rng.uniform(-cell_w / 2, cell_w / 2)
            cy = (row + 0.5) * cell_h + rng.uniform(-cell_h / 2, cell_h / 2)

            if _blocked(cx, cy, width_pct, height_pct, exclusion_zones, safe_zone):
                continue

            placed.append(PlacedItem(
                item=item,
                x_pct=cx - width_pct / 2,
                y_pct=cy - height_pct / 2,
                rotation_deg=rotation,
                scale=scale,
                width_pct=width_pct,
                height_pct=height_pct,
                center_x_pct=cx,
                center_y_pct=cy,
            ))
            break

    logging.info(f"Attempted to place {count} stickers, placed {len(placed)}")
    return placed


class StickerLayoutEngine:
    """
    Thin stateful wrapper binding a configuration and random source.

    Useful where a caller wants to re-run passes with the same settings.
    """

    def __init__(self, config: Optional[StickerLayoutConfig] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or StickerLayoutConfig()
        self.rng = rng or random.Random()

        issues = self.config.validate()
        if issues:
            logging.warning(f"Sticker layout configuration issues: {issues}")

    def layout(self, items: Sequence[StickerItem], viewport: Viewport,
               exclusion_zones: Sequence[Zone] = (),
               safe_zone: Optional[Zone] = None) -> List[PlacedItem]:
        return compute_layout(items, viewport, exclusion_zones, safe_zone,
                              config=self.config, rng=self.rng)

    def get_layout_info(self, viewport: Viewport) -> dict:
        """Derived sizing for a viewport, for debugging"""
        count = target_count(viewport, self.config)
        rows, cols = grid_shape(count, viewport.aspect_ratio)
        return {
            'viewport': (viewport.width, viewport.height),
            'target_count': count,
            'base_scale': base_scale(viewport, self.config),
            'grid': {'rows': rows, 'cols': cols},
            'config': self.config.to_dict(),
        }
