"""
Sticker Layout Configuration

Centralized configuration for the sticker placement engine.
Covers density scaling, sticker sizing, keep-clear padding and parallax.
"""

from typing import Optional
from dataclasses import dataclass
import logging
import os

import yaml


@dataclass
class StickerLayoutConfig:
    """
    Configuration for sticker layout passes.

    Pixel values are device pixels at scale 1.0.
    Percentages are relative to the viewport (0-100).
    """

    # Sticker footprint at scale 1 (images are drawn 150px wide)
    item_width_px: float = 150.0
    item_height_px: float = 150.0

    # Density scaling
    base_count: int = 20                # Stickers at the reference area
    min_count: int = 15                 # Floor for tiny viewports
    max_count: int = 80                 # Ceiling for huge viewports
    reference_width: int = 1920
    reference_height: int = 1080

    # Size scaling
    scale_gain: float = 1.2
    min_scale: float = 0.5
    max_scale: float = 1.5
    scale_jitter: float = 0.2           # +/- 20% around the base scale

    max_rotation_deg: float = 30.0

    # Keep-clear zones
    exclusion_buffer_px: float = 16.0
    safe_zone_padding_px: float = 24.0

    # Fallback safe zone when the main content block can't be measured
    fallback_ui_max_width: float = 1000.0
    fallback_ui_max_height: float = 800.0
    fallback_width_fraction: float = 0.9
    fallback_height_fraction: float = 0.8
    fallback_margin_pct: float = 2.0

    # Viewports at or below this width stack the UI vertically (no safe zone)
    mobile_breakpoint_px: int = 640

    # Relayout
    relayout_debounce_ms: int = 200

    # Parallax (higher = subtler movement)
    parallax_factor: float = 100.0
    orientation_clamp_deg: float = 45.0
    proximity_near: float = 0.65
    proximity_far: float = 0.25

    @property
    def reference_area(self) -> float:
        return float(self.reference_width * self.reference_height)

    def is_mobile_width(self, width: float) -> bool:
        """True when the viewport width falls into the stacked mobile layout"""
        return width <= self.mobile_breakpoint_px

    def to_dict(self) -> dict:
        """Convert config to dictionary for serialization"""
        return {
            field.name: getattr(self, field.name)
            for field in self.__dataclass_fields__.values()
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'StickerLayoutConfig':
        """Create config from dictionary, ignoring unknown keys"""
        valid_fields = {field.name for field in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in valid_fields}
        return cls(**filtered_data)

    def copy(self) -> 'StickerLayoutConfig':
        """Create a copy of this configuration"""
        return StickerLayoutConfig(**self.to_dict())

    def validate(self) -> list:
        """Validate configuration and return list of issues"""
        issues = []

        positive_fields = [
            'item_width_px', 'item_height_px', 'reference_width',
            'reference_height', 'min_scale', 'max_scale'
        ]
        for field in positive_fields:
            value = getattr(self, field)
            if value <= 0:
                issues.append(f"{field} must be positive, got {value}")

        if self.min_count < 0:
            issues.append(f"min_count must not be negative, got {self.min_count}")
        if self.max_count < self.min_count:
            issues.append(f"max_count ({self.max_count}) is below min_count ({self.min_count})")
        if self.min_scale > self.max_scale:
            issues.append(f"min_scale ({self.min_scale}) is above max_scale ({self.max_scale})")
        if not 0 <= self.scale_jitter < 1:
            issues.append(f"scale_jitter must be in [0, 1), got {self.scale_jitter}")
        if not 0 <= self.proximity_far < self.proximity_near <= 1:
            issues.append(
                f"proximity thresholds must satisfy 0 <= far < near <= 1, "
                f"got far={self.proximity_far} near={self.proximity_near}"
            )
        if self.relayout_debounce_ms < 0:
            issues.append(f"relayout_debounce_ms must not be negative, got {self.relayout_debounce_ms}")

        return issues


class ConfigPresets:
    """Predefined layout presets"""

    @staticmethod
    def default() -> StickerLayoutConfig:
        return StickerLayoutConfig()

    @staticmethod
    def dense() -> StickerLayoutConfig:
        """More, smaller stickers"""
        config = StickerLayoutConfig()
        config.base_count = 35
        config.min_count = 20
        config.scale_gain = 0.9
        config.max_scale = 1.1
        return config

    @staticmethod
    def sparse() -> StickerLayoutConfig:
        """Fewer, larger stickers"""
        config = StickerLayoutConfig()
        config.base_count = 12
        config.min_count = 8
        config.scale_gain = 1.4
        return config

    @staticmethod
    def mobile() -> StickerLayoutConfig:
        """Phones: smaller floor and tighter buffers"""
        config = StickerLayoutConfig()
        config.min_count = 10
        config.exclusion_buffer_px = 8.0
        config.min_scale = 0.4
        return config


PRESETS = {
    "default": ConfigPresets.default,
    "dense": ConfigPresets.dense,
    "sparse": ConfigPresets.sparse,
    "mobile": ConfigPresets.mobile,
}


def get_preset(name: str) -> StickerLayoutConfig:
    """Return a preset by name, falling back to default"""
    factory = PRESETS.get(name)
    if factory is None:
        logging.warning(f"Unknown layout preset '{name}', using default")
        return ConfigPresets.default()
    return factory()


def load_layout_config(path: Optional[str]) -> StickerLayoutConfig:
    """
    Load layout configuration from a YAML file.

    The file may name a ``preset`` and override any config field.
    A missing or unreadable file yields the default configuration.
    """
    if not path or not os.path.exists(path):
        if path:
            logging.warning(f"Layout config not found at {path}, using defaults")
        return ConfigPresets.default()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logging.error(f"Error loading layout config {path}: {e}")
        return ConfigPresets.default()

    config = get_preset(data.pop('preset', 'default'))
    merged = config.to_dict()
    merged.update(data)
    config = StickerLayoutConfig.from_dict(merged)

    issues = config.validate()
    if issues:
        logging.warning(f"Layout configuration issues: {issues}")

    return config
