"""
API Request Models

Pydantic models for API request validation.
"""
from typing import Dict, Optional
from pydantic import BaseModel, Field

from sticker_engine import PixelRect, Viewport


class ViewportModel(BaseModel):
    width: float = Field(gt=0, le=16384)
    height: float = Field(gt=0, le=16384)

    def to_viewport(self) -> Viewport:
        return Viewport(self.width, self.height)


class RectModel(BaseModel):
    """Measured bounding box in pixels, as returned by getBoundingClientRect()"""
    left: float
    top: float
    right: float
    bottom: float

    def to_rect(self) -> PixelRect:
        return PixelRect(self.left, self.top, self.right, self.bottom)


class LayoutRequest(BaseModel):
    viewport: ViewportModel
    protected: Dict[str, RectModel] = {}  # named keep-clear regions
    main: Optional[RectModel] = None  # main content block, None = use fallback safe zone
    seed: Optional[int] = None  # pin the random source for reproducible layouts

    def protected_rects(self) -> Dict[str, PixelRect]:
        return {name: rect.to_rect() for name, rect in self.protected.items()}

    def main_rect(self) -> Optional[PixelRect]:
        return self.main.to_rect() if self.main else None


class PreviewRequest(LayoutRequest):
    pointer_x: Optional[float] = None  # pointer position for the parallax shift
    pointer_y: Optional[float] = None


class GenerateTokenRequest(BaseModel):
    email: Optional[str] = None
