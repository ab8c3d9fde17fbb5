"""
Sticker Routes

Handles the sticker catalog, layout passes and layout previews.
"""
import logging
import random
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from models.request_models import LayoutRequest, PreviewRequest
from sticker_engine.preview import render_preview_png

if TYPE_CHECKING:
    from managers.sticker_manager import StickerManager


def setup_sticker_routes(sticker_manager: 'StickerManager') -> APIRouter:
    """
    Setup sticker routes with dependency injection

    Args:
        sticker_manager: StickerManager owning the catalog and current layout

    Returns:
        Configured APIRouter
    """
    router = APIRouter(prefix="/stickers")

    @router.get("/catalog")
    async def get_catalog():
        """List the loaded sticker catalog"""
        return {
            "count": len(sticker_manager.items),
            "stickers": [
                {"id": item.id, "image": item.image, "link": item.link}
                for item in sticker_manager.items
            ],
        }

    @router.post("/catalog/reload")
    async def reload_catalog():
        """Reload the catalog file"""
        try:
            count = sticker_manager.load_catalog()
            return {"status": "success", "count": count}
        except Exception as e:
            logging.error(f"Failed to reload sticker catalog: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @router.post("/layout")
    async def compute_layout(request: LayoutRequest):
        """Run a stateless layout pass for the supplied measurements"""
        rng = random.Random(request.seed) if request.seed is not None else None
        result = sticker_manager.compute(
            request.viewport.to_viewport(),
            request.protected_rects(),
            request.main_rect(),
            rng=rng,
        )
        return result.to_dict()

    @router.get("/layout")
    async def get_current_layout():
        """Current placement list, rebuilt on catalog load and viewport changes"""
        if sticker_manager.current is None:
            return {"placed_count": 0, "stickers": [], **sticker_manager.get_status()}
        return sticker_manager.current.to_dict()

    @router.post("/viewport")
    async def report_viewport(request: LayoutRequest):
        """Report a resize; a relayout follows after the debounce period"""
        scheduled = sticker_manager.report_viewport(
            request.viewport.to_viewport(),
            request.protected_rects(),
            request.main_rect(),
        )
        return {"scheduled": scheduled, **sticker_manager.get_status()}

    @router.post("/preview")
    async def preview_layout(request: PreviewRequest):
        """Render a layout pass as a PNG for inspection"""
        rng = random.Random(request.seed) if request.seed is not None else None
        viewport = request.viewport.to_viewport()
        result = sticker_manager.compute(
            viewport, request.protected_rects(), request.main_rect(), rng=rng
        )

        pointer = None
        if request.pointer_x is not None and request.pointer_y is not None:
            pointer = (request.pointer_x, request.pointer_y)

        try:
            png = render_preview_png(
                result.placements, viewport,
                result.exclusion_zones, result.safe_zone,
                pointer=pointer,
                parallax_factor=sticker_manager.config.parallax_factor,
            )
        except Exception as e:
            logging.error(f"Failed to render layout preview: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to render preview: {str(e)}")

        return Response(content=png, media_type="image/png")

    return router
