"""
Parallax Offsets

Pointer- and tilt-driven offsets applied to placed stickers by the renderer,
plus the proximity blend used to cross-fade the hero profile image.
"""

import math
from typing import Tuple

from .geometry import PixelRect, Viewport


def _usable_factor(factor: float) -> bool:
    return math.isfinite(factor) and factor > 0


def pointer_offset(pointer_x: float, pointer_y: float, viewport: Viewport,
                   factor: float) -> Tuple[float, float]:
    """
    Pixel offset for a pointer position.

    Offsets grow with the pointer's distance from the viewport center and
    shrink as the factor grows. A zero, negative or non-finite factor
    disables motion.
    """
    if not _usable_factor(factor):
        return 0.0, 0.0
    return ((pointer_x - viewport.width / 2) / factor,
            (pointer_y - viewport.height / 2) / factor)


def orientation_offset(gamma: float, beta: float, viewport: Viewport, factor: float,
                       clamp_deg: float = 45.0) -> Tuple[float, float]:
    """
    Pixel offset for device tilt.

    gamma is left-right tilt, beta front-back tilt, both in degrees.
    Missing readings (non-finite) count as level.
    """
    if not _usable_factor(factor) or clamp_deg <= 0:
        return 0.0, 0.0

    gamma = gamma if math.isfinite(gamma) else 0.0
    beta = beta if math.isfinite(beta) else 0.0
    gamma = max(-clamp_deg, min(clamp_deg, gamma))
    beta = max(-clamp_deg, min(clamp_deg, beta))

    return ((gamma / clamp_deg) * (viewport.width / 2 / factor),
            (beta / clamp_deg) * (viewport.height / 2 / factor))


def proximity(pointer_x: float, pointer_y: float, target: PixelRect,
              near: float = 0.65, far: float = 0.25) -> float:
    """
    Blend value in [0, 1] for how close the pointer is to a target element.

    Closeness falls off linearly out to twice the target's larger side;
    it snaps to 1 above `near`, to 0 below `far`, and ramps in between.
    """
    width = target.right - target.left
    height = target.bottom - target.top
    cx = target.left + width / 2
    cy = target.top + height / 2
    max_dist = max(width, height) * 2
    if max_dist <= 0:
        return 0.0

    dist = math.hypot(pointer_x - cx, pointer_y - cy)
    closeness = max(0.0, min(1.0, 1 - dist / max_dist))

    if closeness >= near:
        return 1.0
    if closeness <= far:
        return 0.0
    return (closeness - far) / (near - far)
