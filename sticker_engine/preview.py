"""
Layout Preview Renderer

Draws a placement pass onto a Pillow image so layouts can be inspected
without a browser: keep-clear zones as outlines, stickers as rotated boxes.
"""

import io
import math
import logging
from typing import List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from .geometry import Viewport, Zone
from .layout import PlacedItem
from .parallax import pointer_offset

BACKGROUND_COLOR = (235, 242, 250)
EXCLUSION_COLOR = (220, 60, 60)
SAFE_ZONE_COLOR = (40, 160, 90)
STICKER_FILL = (100, 150, 255)
STICKER_OUTLINE = (30, 60, 140)
LABEL_COLOR = (255, 255, 255)

# Longest canvas side; larger viewports are drawn scaled down
MAX_PREVIEW_SIDE = 2048


def _zone_box(zone: Zone, width: int, height: int) -> Tuple[int, int, int, int]:
    return (
        int(zone.x_min / 100 * width),
        int(zone.y_min / 100 * height),
        int(zone.x_max / 100 * width),
        int(zone.y_max / 100 * height),
    )


def _sticker_polygon(cx: float, cy: float, w: float, h: float,
                     rotation_deg: float) -> List[Tuple[float, float]]:
    """Corners of a w x h box centered on (cx, cy), rotated clockwise"""
    theta = math.radians(rotation_deg)
    cos_t, sin_t = math.cos(theta), math.sin(theta)
    corners = [(-w / 2, -h / 2), (w / 2, -h / 2), (w / 2, h / 2), (-w / 2, h / 2)]
    return [(cx + x * cos_t - y * sin_t, cy + x * sin_t + y * cos_t) for x, y in corners]


def render_preview(placements: Sequence[PlacedItem], viewport: Viewport,
                   exclusion_zones: Sequence[Zone] = (),
                   safe_zone: Optional[Zone] = None,
                   pointer: Optional[Tuple[float, float]] = None,
                   parallax_factor: float = 0.0) -> Image.Image:
    """
    Render placements to an RGB image the size of the viewport.

    Viewports with a side longer than MAX_PREVIEW_SIDE are rendered at a
    reduced size with the same aspect ratio.

    Args:
        placements: Output of a layout pass
        viewport: Viewport the pass was computed for
        exclusion_zones: Drawn as red outlines
        safe_zone: Drawn as a green outline
        pointer: Optional pointer position in pixels; shifts stickers by
            the parallax offset for that position
        parallax_factor: Parallax strength (<= 0 disables the shift)
    """
    shrink = min(1.0, MAX_PREVIEW_SIDE / max(viewport.width, viewport.height))
    width = max(1, int(viewport.width * shrink))
    height = max(1, int(viewport.height * shrink))
    img = Image.new('RGB', (width, height), BACKGROUND_COLOR)
    draw = ImageDraw.Draw(img)
    font = ImageFont.load_default()

    for zone in exclusion_zones:
        draw.rectangle(_zone_box(zone, width, height), outline=EXCLUSION_COLOR, width=2)
    if safe_zone is not None:
        draw.rectangle(_zone_box(safe_zone, width, height), outline=SAFE_ZONE_COLOR, width=3)

    dx, dy = (0.0, 0.0)
    if pointer is not None:
        dx, dy = pointer_offset(pointer[0], pointer[1], viewport, parallax_factor)
        dx, dy = dx * shrink, dy * shrink

    for placed in placements:
        cx = placed.center_x_pct / 100 * width + dx
        cy = placed.center_y_pct / 100 * height + dy
        w = placed.width_pct / 100 * width
        h = placed.height_pct / 100 * height
        polygon = _sticker_polygon(cx, cy, w, h, placed.rotation_deg)
        draw.polygon(polygon, fill=STICKER_FILL, outline=STICKER_OUTLINE)
        label = str(placed.item.id)
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        draw.text((cx - (right - left) / 2, cy - (bottom - top) / 2), label,
                  fill=LABEL_COLOR, font=font)

    logging.debug(f"Rendered preview with {len(placements)} stickers at {width}x{height}")

    return img


def render_preview_png(*args, **kwargs) -> bytes:
    """render_preview() encoded as PNG bytes"""
    img = render_preview(*args, **kwargs)
    buffer = io.BytesIO()
    img.save(buffer, format='PNG', compress_level=1)
    return buffer.getvalue()
