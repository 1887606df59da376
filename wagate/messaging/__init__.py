"""
Messaging layer for wagate.

Addressing helpers, QR rendering and the protocol client implementations.
"""
