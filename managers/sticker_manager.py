"""
Sticker Manager

Owns the sticker catalog and the current placement list, and re-runs the
layout engine when the catalog arrives or the viewport changes.
"""
import logging
import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from sticker_engine import (
    StickerLayoutConfig,
    StickerItem,
    PlacedItem,
    Viewport,
    PixelRect,
    Zone,
    RelayoutScheduler,
    collect_zones,
    compute_layout,
    load_catalog,
)
from sticker_engine.layout import target_count


@dataclass
class LayoutResult:
    """One placement pass together with the zones it avoided"""
    viewport: Viewport
    placements: List[PlacedItem]
    exclusion_zones: List[Zone] = field(default_factory=list)
    safe_zone: Optional[Zone] = None
    target_count: int = 0

    def to_dict(self) -> dict:
        return {
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
            "target_count": self.target_count,
            "placed_count": len(self.placements),
            "exclusion_zones": [zone.to_dict() for zone in self.exclusion_zones],
            "safe_zone": self.safe_zone.to_dict() if self.safe_zone else None,
            "stickers": [placed.to_dict() for placed in self.placements],
        }


class StickerManager:
    """Manages the sticker catalog and background sticker layout"""

    def __init__(self, catalog_path: str, config: Optional[StickerLayoutConfig] = None,
                 rng: Optional[random.Random] = None):
        self.catalog_path = catalog_path
        self.config = config or StickerLayoutConfig()
        self.rng = rng or random.Random()

        issues = self.config.validate()
        if issues:
            logging.warning(f"Sticker layout configuration issues: {issues}")

        # Current state
        self.items: List[StickerItem] = []
        self.viewport = Viewport(self.config.reference_width, self.config.reference_height)
        self.protected: Dict[str, PixelRect] = {}
        self.main_rect: Optional[PixelRect] = None
        self.current: Optional[LayoutResult] = None
        self.layout_passes = 0

        self.scheduler = RelayoutScheduler(
            self.relayout,
            debounce_seconds=self.config.relayout_debounce_ms / 1000,
            is_mobile_width=self.config.is_mobile_width,
        )

    def load_catalog(self) -> int:
        """(Re)load the catalog file and return the number of usable stickers"""
        return self.set_catalog(load_catalog(self.catalog_path))

    def set_catalog(self, items: List[StickerItem]) -> int:
        self.items = list(items)
        logging.info(f"Sticker catalog loaded: {len(self.items)} stickers")

        if not self.items:
            if self.current is not None:
                # Drop placements that reference the old catalog
                self.relayout()
            return 0
        if not self.scheduler.catalog_loaded():
            # Catalog replaced after the first pass
            self.relayout()
        return len(self.items)

    def compute(self, viewport: Viewport,
                protected: Optional[Dict[str, PixelRect]] = None,
                main_rect: Optional[PixelRect] = None,
                rng: Optional[random.Random] = None) -> LayoutResult:
        """Stateless placement pass for the given measurements"""
        zones, safe_zone = collect_zones(viewport, protected, main_rect, self.config)
        placements = compute_layout(
            self.items, viewport, zones, safe_zone,
            config=self.config, rng=rng or self.rng,
        )
        return LayoutResult(
            viewport=viewport,
            placements=placements,
            exclusion_zones=zones,
            safe_zone=safe_zone,
            target_count=target_count(viewport, self.config) if self.items else 0,
        )

    def relayout(self) -> LayoutResult:
        """Rebuild the current placement list from the last reported measurements"""
        self.current = self.compute(self.viewport, self.protected, self.main_rect)
        self.layout_passes += 1
        return self.current

    def report_viewport(self, viewport: Viewport,
                        protected: Optional[Dict[str, PixelRect]] = None,
                        main_rect: Optional[PixelRect] = None) -> bool:
        """
        Record new measurements and schedule a debounced relayout.

        Must be called from within a running event loop.

        Returns:
            True if a relayout was scheduled
        """
        self.viewport = viewport
        self.protected = dict(protected or {})
        self.main_rect = main_rect
        return self.scheduler.viewport_changed(viewport.width, viewport.height)

    def get_status(self) -> dict:
        return {
            "catalog_size": len(self.items),
            "layout_passes": self.layout_passes,
            "relayout_pending": self.scheduler.pending,
            "viewport": {"width": self.viewport.width, "height": self.viewport.height},
        }

    def stop(self) -> None:
        self.scheduler.cancel()
