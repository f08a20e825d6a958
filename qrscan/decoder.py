"""
QR Scan Decoder - Find and decode QR codes in an image
License: MIT
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

import zxingcpp
from PIL import Image

try:
    from pyzbar.pyzbar import decode as zbar_decode, ZBarSymbol
except ImportError as e:
    raise ImportError(
        "pyzbar could not be loaded. Run: pip install pyzbar\n"
        "Also install zbar library:\n"
        "  - Windows: Install Visual C++ Redistributable\n"
        "  - macOS: brew install zbar\n"
        "  - Linux: apt install libzbar0"
    ) from e


@dataclass(frozen=True)
class DecodedCode:
    content: str
    raw: bytes
    symbol: str
    rect: Tuple[int, int, int, int]
    polygon: Tuple[Tuple[int, int], ...]
    quality: int
    orientation: Optional[str] = None
    version: Optional[int] = None
    ec_level: Optional[str] = None

    @property
    def grid_size(self) -> Optional[int]:
        """Modules per side."""
        if self.version is None:
            return None
        return self.version * 4 + 17


def _symbol_info(image: Image.Image) -> List[Tuple[bytes, Optional[int], Optional[str]]]:
    """(payload, version, EC level) per QR symbol; zbar reports neither of the latter."""
    info = []
    for result in zxingcpp.read_barcodes(image.convert('L'), formats=zxingcpp.BarcodeFormat.QRCode):
        version = str(getattr(result, 'version', '') or '')
        info.append((
            result.bytes,
            int(version) if version.isdigit() else None,
            result.ec_level or None,
        ))
    return info


def _from_zbar(obj, info) -> DecodedCode:
    # Pair with the zxing result carrying the same payload
    version, ec_level = next(((v, ec) for raw, v, ec in info if raw == obj.data), (None, None))

    return DecodedCode(
        # Use errors='replace' to prevent crashes on non-UTF8 payloads
        content=obj.data.decode('utf-8', errors='replace'),
        raw=obj.data,
        symbol=obj.type,
        rect=(obj.rect.left, obj.rect.top, obj.rect.width, obj.rect.height),
        polygon=tuple((p.x, p.y) for p in obj.polygon),
        quality=obj.quality,
        # Only reported by recent pyzbar releases
        orientation=getattr(obj, 'orientation', None),
        version=version,
        ec_level=ec_level,
    )


def decode_all(image: Image.Image) -> List[DecodedCode]:
    """Decode every QR code in the image, in the order zbar reports them."""
    decoded_objects = zbar_decode(image, symbols=[ZBarSymbol.QRCODE])
    if not decoded_objects:
        return []

    info = _symbol_info(image)
    return [_from_zbar(obj, info) for obj in decoded_objects]


def decode(image: Image.Image) -> Optional[DecodedCode]:
    """
    Return the first QR code zbar reports, or None.

    "First" is zbar's scan order, not the largest or best-quality symbol.
    Symbols zbar cannot reconstruct are simply absent from the result.
    """
    results = decode_all(image)
    if not results:
        return None
    return results[0]
