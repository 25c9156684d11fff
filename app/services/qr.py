import base64
from io import BytesIO

import qrcode


def qr_data_url(data: str) -> str:
    """otpauth URI → PNG data URL (Pillow 백엔드)"""
    img = qrcode.make(data)
    buf = BytesIO()
    img.save(buf, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buf.getvalue()).decode("ascii")
