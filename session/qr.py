"""
Terminal rendering of pairing QR codes.
"""

import io
import sys
from typing import Optional, TextIO

import qrcode


def render_qr(data: str) -> str:
    """Render QR data as ASCII art suitable for a terminal."""
    qr = qrcode.QRCode(border=1)
    qr.add_data(data)
    qr.make(fit=True)

    buffer = io.StringIO()
    qr.print_ascii(out=buffer, invert=True)
    return buffer.getvalue()


def print_qr(data: str, out: Optional[TextIO] = None) -> None:
    """Print the pairing QR code with scan instructions."""
    out = out or sys.stdout
    out.write("\n📱 Scan this QR code with WhatsApp:\n")
    out.write(render_qr(data))
    out.write("\n⏳ Waiting for QR code scan...\n")
    out.flush()
