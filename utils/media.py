"""
Shared image encoding utilities.

Used by the referral routes to serve QR codes.
"""
import io

import qrcode
from PIL import Image


def image_to_png(img: Image.Image) -> bytes:
    """Encode a Pillow image as PNG bytes (fast compression)"""
    buffer = io.BytesIO()
    img.save(buffer, format="PNG", compress_level=1)
    return buffer.getvalue()


def make_qr_png(content: str, box_size: int = 10, border: int = 4) -> bytes:
    """
    Render content as a black-on-white QR code.

    Args:
        content: URL or text to encode
        box_size: Pixels per QR module
        border: Quiet zone width in modules

    Returns:
        PNG bytes
    """
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(content)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    return image_to_png(img.convert("RGB"))
