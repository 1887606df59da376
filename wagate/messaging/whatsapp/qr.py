"""
Pairing QR rendering.

The protocol client hands over the raw pairing string; the gateway shows it as
a PNG data URI on the /qr page and as block characters in the console log.
"""

import base64
import io

import qrcode


def _build(payload: str, box_size: int, border: int) -> qrcode.QRCode:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)
    return qr


def render_data_uri(payload: str) -> str:
    """Render a pairing payload as a `data:image/png;base64,...` URI."""
    image = _build(payload, box_size=8, border=4).make_image()
    buffer = io.BytesIO()
    image.save(buffer)
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"


def render_ascii(payload: str) -> str:
    """Render a pairing payload as terminal-friendly block characters."""
    out = io.StringIO()
    _build(payload, box_size=1, border=2).print_ascii(out=out)
    return out.getvalue()
