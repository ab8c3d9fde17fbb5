"""
Verification Token Cleanup

Background task that periodically deletes expired verification tokens.
"""
import asyncio
import logging

from config import TOKEN_CLEANUP_INTERVAL
from managers.referral_manager import ReferralManager


async def token_cleanup_task(referral_manager: ReferralManager, interval: float = TOKEN_CLEANUP_INTERVAL):
    """Delete expired tokens every `interval` seconds until cancelled"""
    logging.info("Token cleanup task started")

    while True:
        try:
            await asyncio.sleep(interval)

            removed = referral_manager.purge_expired_tokens()
            # Only log when something was removed
            if removed:
                logging.info(f"Purged {removed} expired verification tokens")

        except asyncio.CancelledError:
            logging.info("Token cleanup task stopped")
            break
        except Exception as e:
            logging.error(f"Error in token cleanup task: {e}")
            # Keep running even if a purge fails
            await asyncio.sleep(5)
