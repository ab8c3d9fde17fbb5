"""
System Routes

Handles health checks and layout diagnostics.
"""
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from fastapi import APIRouter

from config import APP_VERSION
from sticker_engine import StickerLayoutEngine, Viewport

if TYPE_CHECKING:
    from managers.sticker_manager import StickerManager
    from managers.referral_manager import ReferralManager


def setup_system_routes(
    sticker_manager: 'StickerManager',
    referral_manager: Optional['ReferralManager'] = None
) -> APIRouter:
    """
    Setup system routes with dependency injection

    Args:
        sticker_manager: StickerManager for catalog and layout status
        referral_manager: Optional ReferralManager for database status

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            "version": APP_VERSION,
            "stickers": sticker_manager.get_status(),
            "database": bool(referral_manager and referral_manager.conn),
        }

    @router.get("/layout/info")
    async def layout_info(width: float = 1920, height: float = 1080):
        """Derived sticker count, scale and grid for a viewport size"""
        engine = StickerLayoutEngine(sticker_manager.config)
        return engine.get_layout_info(Viewport(max(width, 1.0), max(height, 1.0)))

    return router
