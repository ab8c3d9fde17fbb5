"""
Viewport Geometry and Keep-Clear Zones

Converts measured pixel rectangles of protected UI elements into
percentage-of-viewport zones consumed by the layout engine.
"""

from typing import Dict, Iterable, List, Optional, Tuple, Union
from dataclasses import dataclass

from .config import StickerLayoutConfig


@dataclass(frozen=True)
class Viewport:
    """Viewport size in device pixels. Callers guarantee finite positive values."""
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


@dataclass(frozen=True)
class PixelRect:
    """Measured bounding box in pixels (client coordinates)"""
    left: float
    top: float
    right: float
    bottom: float

    @classmethod
    def from_size(cls, x: float, y: float, width: float, height: float) -> 'PixelRect':
        return cls(left=x, top=y, right=x + width, bottom=y + height)


@dataclass(frozen=True)
class Zone:
    """Axis-aligned rectangle in percentage-of-viewport coordinates"""
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    def contains(self, x: float, y: float) -> bool:
        """Point test, boundary included"""
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max

    def overlaps(self, other: 'Zone') -> bool:
        """Open-interval overlap: rectangles that only touch do not overlap"""
        return (self.x_min < other.x_max and self.x_max > other.x_min and
                self.y_min < other.y_max and self.y_max > other.y_min)

    def clamped(self) -> 'Zone':
        return Zone(
            x_min=max(0.0, self.x_min),
            x_max=min(100.0, self.x_max),
            y_min=max(0.0, self.y_min),
            y_max=min(100.0, self.y_max),
        )

    def to_dict(self) -> dict:
        return {
            'xMin': self.x_min, 'xMax': self.x_max,
            'yMin': self.y_min, 'yMax': self.y_max,
        }


def box_around(cx: float, cy: float, width: float, height: float) -> Zone:
    """Zone of the given size centered on (cx, cy)"""
    half_w = width / 2
    half_h = height / 2
    return Zone(cx - half_w, cx + half_w, cy - half_h, cy + half_h)


def rect_to_zone(rect: PixelRect, viewport: Viewport, padding_px: float = 0.0) -> Zone:
    """Convert a pixel rect to percentages, outset by padding_px on every side"""
    return Zone(
        x_min=(rect.left - padding_px) / viewport.width * 100,
        x_max=(rect.right + padding_px) / viewport.width * 100,
        y_min=(rect.top - padding_px) / viewport.height * 100,
        y_max=(rect.bottom + padding_px) / viewport.height * 100,
    )


def derive_exclusion_zones(measurements: Union[Dict[str, PixelRect], Iterable[PixelRect]],
                           viewport: Viewport,
                           config: StickerLayoutConfig) -> List[Zone]:
    """
    Build exclusion zones from measured protected regions.

    Args:
        measurements: Rects keyed by region name, or a plain iterable of rects
        viewport: Current viewport
        config: Supplies the buffer margin in pixels

    Returns:
        One zone per measured rect, outset by the configured buffer
    """
    rects = measurements.values() if isinstance(measurements, dict) else measurements
    return [rect_to_zone(rect, viewport, config.exclusion_buffer_px) for rect in rects]


def fallback_safe_zone(viewport: Viewport, config: StickerLayoutConfig) -> Zone:
    """Centered heuristic rectangle approximating the main content block"""
    ui_width = min(config.fallback_ui_max_width, viewport.width * config.fallback_width_fraction)
    ui_height = min(config.fallback_ui_max_height, viewport.height * config.fallback_height_fraction)
    x_half = ui_width / viewport.width * 100 / 2
    y_half = ui_height / viewport.height * 100 / 2
    margin = config.fallback_margin_pct
    return Zone(
        x_min=50 - x_half - margin,
        x_max=50 + x_half + margin,
        y_min=50 - y_half - margin,
        y_max=50 + y_half + margin,
    )


def derive_safe_zone(main_rect: Optional[PixelRect], viewport: Viewport,
                     config: StickerLayoutConfig) -> Optional[Zone]:
    """
    Safe zone around the main content block.

    Returns None on narrow viewports, where the UI stacks vertically.
    Uses the centered fallback when main_rect is unavailable.
    """
    if config.is_mobile_width(viewport.width):
        return None
    if main_rect is None:
        return fallback_safe_zone(viewport, config)
    return rect_to_zone(main_rect, viewport, config.safe_zone_padding_px).clamped()


def collect_zones(viewport: Viewport,
                  protected: Optional[Dict[str, PixelRect]] = None,
                  main_rect: Optional[PixelRect] = None,
                  config: Optional[StickerLayoutConfig] = None) -> Tuple[List[Zone], Optional[Zone]]:
    """Convenience wrapper returning (exclusion_zones, safe_zone)"""
    config = config or StickerLayoutConfig()
    zones = derive_exclusion_zones(protected or {}, viewport, config)
    return zones, derive_safe_zone(main_rect, viewport, config)
