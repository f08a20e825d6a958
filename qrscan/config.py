"""
QR Scan Config - Immutable settings resolved once from the command line
License: MIT
"""

from dataclasses import dataclass
from typing import List, Optional, Tuple

STDIN_MARKER = '-'

# Export formats, in the order they are written
EXPORT_FORMATS = ('svg', 'ascii', 'png', 'jpeg')


@dataclass(frozen=True)
class Config:
    image: Optional[str] = None
    preview: bool = False
    preview_x: int = 0
    preview_y: int = 0
    preview_w: Optional[int] = None
    preview_h: Optional[int] = None
    metadata: bool = False
    qr: bool = False
    no_content: bool = False
    interval: int = 200
    timeout: Optional[float] = None
    camera: int = 0
    invert_colors: bool = False
    fg: str = '#000'
    bg: str = '#fff'
    no_quiet_zone: bool = False
    error_correction: Optional[str] = None
    qr_version: Optional[int] = None
    ascii: Optional[str] = None
    svg: Optional[str] = None
    png: Optional[str] = None
    jpeg: Optional[str] = None

    @property
    def source_kind(self) -> str:
        if self.image is None:
            return 'camera'
        if self.image == STDIN_MARKER:
            return 'stdin'
        return 'file'

    @property
    def quiet_zone(self) -> bool:
        return not self.no_quiet_zone

    @property
    def colors(self) -> Tuple[str, str]:
        """(dark, light) colors for exported images."""
        if self.invert_colors:
            return self.bg, self.fg
        return self.fg, self.bg

    @property
    def exports(self) -> List[Tuple[str, str]]:
        return [(fmt, getattr(self, fmt)) for fmt in EXPORT_FORMATS
                if getattr(self, fmt) is not None]
