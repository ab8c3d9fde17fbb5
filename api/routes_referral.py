"""
Referral Routes

Handles email verification, referral code issuance and referral link visits.
"""
import logging
from typing import TYPE_CHECKING

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import RedirectResponse, Response

from models.request_models import GenerateTokenRequest
from utils.media import make_qr_png
from utils.route_helpers import manager_operation

if TYPE_CHECKING:
    from managers.referral_manager import ReferralManager
    from managers.mail_manager import MailManager


def setup_referral_routes(referral_manager: 'ReferralManager', mail_manager: 'MailManager') -> APIRouter:
    """
    Setup referral routes with dependency injection

    Args:
        referral_manager: ReferralManager for tokens, codes and clicks
        mail_manager: MailManager for verification emails

    Returns:
        Configured APIRouter
    """
    router = APIRouter()

    @router.post("/generate")
    async def generate_token(request: GenerateTokenRequest, http_request: Request):
        """Issue a verification token and email the link"""
        token = manager_operation(
            referral_manager.issue_token, request.email,
            error_context="issue verification token",
        )
        link = referral_manager.verification_link(token, str(http_request.base_url))

        # Delivery problems are logged by the mail manager, not reported here
        await mail_manager.send_verification(request.email.strip(), link)

        return {"message": "Check your inbox for verification link"}

    @router.get("/verify")
    async def verify_token(http_request: Request, token: str = ""):
        """Verify an email token and return the referral details"""
        user = manager_operation(
            referral_manager.verify_token, token,
            error_context="verify token",
        )
        return {
            "referralLink": referral_manager.referral_link(user.code, str(http_request.base_url)),
            "userCode": user.code,
            "formUrl": referral_manager.form_url,
            "clickCount": user.clicked_count,
        }

    @router.get("/r/{code}")
    async def follow_referral(code: str):
        """Count a referral visit and forward to the survey form"""
        manager_operation(referral_manager.record_click, code, error_context="record referral click")
        return RedirectResponse(referral_manager.form_redirect_url(code), status_code=302)

    @router.get("/r/{code}/qrcode")
    async def referral_qr_code(code: str, http_request: Request):
        """QR code image of a referral link"""
        user = manager_operation(referral_manager.get_user_by_code, code, error_context="load referral code")
        if user is None:
            raise HTTPException(status_code=404, detail="Unknown referral code")

        link = referral_manager.referral_link(user.code, str(http_request.base_url))
        try:
            png = make_qr_png(link)
        except Exception as e:
            logging.error(f"Failed to generate QR code for {code}: {e}")
            raise HTTPException(status_code=500, detail="Failed to generate QR code")
        return Response(content=png, media_type="image/png")

    return router
