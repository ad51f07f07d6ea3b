"""
Lowkey - LSB steganography across PNG carriers

Hides an arbitrary payload in the least-significant bits of RGBA channels:
- Versioned, ChaCha20-Poly1305 encrypted message framing
- One payload spread over an ordered set of carriers
- Automatic carrier ordering from embedded sequence metadata
- Byte-exact preservation of ancillary PNG chunks (ICC profile, EXIF, ...)
- Optional auto-resize of a single carrier to fit the payload
"""

__version__ = "0.3.0"
__author__ = "Lowkey Team"
