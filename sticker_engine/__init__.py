"""
Sticker Engine - Background Sticker Placement

Scatters decorative stickers around the landing page content while keeping
clear of protected UI regions, with density and size scaled to the viewport.
"""

from .config import StickerLayoutConfig, ConfigPresets, load_layout_config
from .geometry import Viewport, PixelRect, Zone, collect_zones, derive_exclusion_zones, derive_safe_zone
from .layout import StickerItem, PlacedItem, StickerLayoutEngine, compute_layout, target_count
from .catalog import load_catalog, parse_catalog
from .scheduler import RelayoutScheduler

__all__ = [
    'StickerLayoutConfig',
    'ConfigPresets',
    'load_layout_config',
    'Viewport',
    'PixelRect',
    'Zone',
    'collect_zones',
    'derive_exclusion_zones',
    'derive_safe_zone',
    'StickerItem',
    'PlacedItem',
    'StickerLayoutEngine',
    'compute_layout',
    'target_count',
    'load_catalog',
    'parse_catalog',
    'RelayoutScheduler',
]
