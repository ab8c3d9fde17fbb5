"""
Snowboard Lessons Site Main Application

This is the entry point for the landing page server.
It wires together the managers and API routes.
"""
import asyncio
import logging
import os
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from fastapi.staticfiles import StaticFiles

# Managers
from managers.sticker_manager import StickerManager
from managers.referral_manager import ReferralManager
from managers.mail_manager import MailManager
from managers.token_cleanup import token_cleanup_task

# API routes
from api.routes_stickers import setup_sticker_routes
from api.routes_referral import setup_referral_routes
from api.routes_system import setup_system_routes

from sticker_engine import load_layout_config

# Config
from config import (
    APP_VERSION, BASE_URL, CATALOG_PATH, DB_PATH, DEFAULT_PORT, FORM_URL, HOST,
    INDEX_HTML_PATH, LAYOUT_CONFIG_PATH, PRODUCTION_PORT, SMTP_HOST, SMTP_PASS,
    SMTP_PORT, SMTP_USER, STATIC_DIR, TOKEN_CLEANUP_INTERVAL,
)

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

# Global manager instances (will be initialized in lifespan)
sticker_manager: StickerManager = None
referral_manager: ReferralManager = None
mail_manager: MailManager = None
cleanup_task = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan management for FastAPI application.
    Handles startup and shutdown tasks.
    """
    global sticker_manager, referral_manager, mail_manager, cleanup_task

    # STARTUP
    logging.info("Starting snowboard site...")

    try:
        # Sticker layout
        logging.info("Initializing sticker manager...")
        layout_config = load_layout_config(LAYOUT_CONFIG_PATH)
        sticker_manager = StickerManager(CATALOG_PATH, layout_config)
        sticker_manager.load_catalog()

        # Referral database
        logging.info(f"Opening referral database at {DB_PATH}...")
        referral_manager = ReferralManager(DB_PATH, base_url=BASE_URL, form_url=FORM_URL)
        referral_manager.initialize()

        mail_manager = MailManager(SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS)
        if not mail_manager.configured:
            logging.warning("SMTP credentials missing, verification emails will only be logged")

        # Setup routers with managers
        logging.info("Setting up API routes...")
        app.include_router(setup_sticker_routes(sticker_manager))
        app.include_router(setup_referral_routes(referral_manager, mail_manager))
        app.include_router(setup_system_routes(sticker_manager, referral_manager))

        logging.info("Starting token cleanup task...")
        cleanup_task = asyncio.create_task(
            token_cleanup_task(referral_manager, TOKEN_CLEANUP_INTERVAL)
        )

        logging.info("Snowboard site started successfully!")

    except Exception as e:
        logging.error(f"Failed to start snowboard site: {e}")
        import traceback
        logging.error(f"Traceback: {traceback.format_exc()}")
        raise

    yield  # Application is running

    # SHUTDOWN
    logging.info("Shutting down snowboard site...")

    try:
        if cleanup_task:
            cleanup_task.cancel()
            try:
                await cleanup_task
            except asyncio.CancelledError:
                pass

        if sticker_manager:
            sticker_manager.stop()

        if referral_manager:
            referral_manager.close()

        logging.info("Snowboard site shut down successfully!")

    except Exception as e:
        logging.error(f"Error during shutdown: {e}")


# Create FastAPI app with lifespan
app = FastAPI(
    title="Snowboard Lessons",
    description="Landing page backend: sticker layout and referral links",
    version=APP_VERSION,
    lifespan=lifespan
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log every request as [timestamp] METHOD URL"""
    logging.info(f"[{datetime.now(timezone.utc).isoformat()}] {request.method} {request.url.path}")
    return await call_next(request)


@app.get("/", response_class=HTMLResponse)
async def landing_page():
    """Serve the landing page"""
    try:
        with open(INDEX_HTML_PATH, "r", encoding="utf-8") as f:
            return f.read()
    except FileNotFoundError:
        return """
        <h1>Better Techniques Equals More Fun!</h1>
        <p>The landing page build (index.html) was not found next to the server.</p>
        <p>You can access the API documentation at <a href="/docs">/docs</a></p>
        """


# Mount static files if directory exists
if os.path.exists(STATIC_DIR):
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")


if __name__ == "__main__":
    import argparse
    import uvicorn

    # Parse command line arguments
    parser = argparse.ArgumentParser(description='Snowboard lessons landing page server')
    parser.add_argument('--production', action='store_true',
                       help='Run in production mode (port 80)')
    parser.add_argument('--port', type=int, default=None,
                       help='Custom port (overrides --production)')
    args = parser.parse_args()

    # Determine port
    if args.port:
        port = args.port
    elif args.production:
        port = PRODUCTION_PORT
    else:
        port = DEFAULT_PORT

    uvicorn.run(
        "main:app",
        host=HOST,
        port=port,
        log_level="info",
        reload=False
    )
