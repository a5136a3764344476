from __future__ import annotations
from io import BytesIO
import secrets

import qrcode

def new_redemption_code(nbytes: int = 12) -> str:
    """Single-use code shown to the user and scanned by the merchant."""
    return secrets.token_urlsafe(nbytes)

def render_png(code: str) -> bytes:
    img = qrcode.make(code)
    b = BytesIO()
    img.save(b, format="PNG")
    return b.getvalue()
