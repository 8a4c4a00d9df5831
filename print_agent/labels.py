"""
ZPL Label Templates
===================

Builds ZPL label batches from item lists (barcode, name, price).

Every item becomes one self-contained ^XA...^XZ block. The block layout
comes from a LayoutProfile, selected by name from PROFILES.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

from .config import DPI, LABEL_PROFILE
from .errors import ValidationError
from .handlers.zpl import ZPLHandler
from .logger import logger
from .utils import digits_only, ean8_from, mm_to_dots

CODE128 = 'code128'
EAN8 = 'ean8'

# Longest price string embedded on a label
MAX_PRICE_LENGTH = 16

CODE_KEYS = ('code', 'codigo_barra', 'codigo', 'barcode')
NAME_KEYS = ('name', 'nombre')
PRICE_KEYS = ('price', 'precio')


@dataclass(frozen=True)
class LayoutProfile:
    """Label geometry and barcode parameters, all in dots."""

    name: str
    label_width: int
    label_height: int
    symbology: str = CODE128
    orientation: str = 'N'  # N = normal, R = rotated 90 degrees

    # ^BY module width, wide/narrow ratio, bar height
    module_width: int = 2
    ratio: float = 2.0
    bar_height: int = 50
    interpretation_line: bool = True

    barcode_origin: Tuple[int, int] = (30, 20)
    text_origin: Tuple[int, int] = (30, 100)
    font_height: int = 20
    font_width: int = 20

    show_name: bool = True
    show_price: bool = False
    price_origin: Optional[Tuple[int, int]] = None
    price_font_height: int = 30
    price_font_width: int = 30

    debug_box: bool = False

    @classmethod
    def from_mm(cls, name: str, width_mm: float, height_mm: float,
                barcode_origin_mm: Tuple[float, float],
                text_origin_mm: Tuple[float, float],
                price_origin_mm: Optional[Tuple[float, float]] = None,
                dpi: int = DPI, **kwargs) -> 'LayoutProfile':
        """Build a profile from millimetre measurements."""

        def point(mm):
            return (mm_to_dots(mm[0], dpi), mm_to_dots(mm[1], dpi))

        return cls(
            name=name,
            label_width=mm_to_dots(width_mm, dpi),
            label_height=mm_to_dots(height_mm, dpi),
            barcode_origin=point(barcode_origin_mm),
            text_origin=point(text_origin_mm),
            price_origin=point(price_origin_mm) if price_origin_mm else None,
            **kwargs
        )


@dataclass(frozen=True)
class LabelBatch:
    """Result of build_labels."""

    zpl: str
    rendered: int
    skipped: int


def _ean8_profile() -> LayoutProfile:
    return LayoutProfile.from_mm(
        'ean8', 50, 25,
        barcode_origin_mm=(6, 3),
        text_origin_mm=(6, 17),
        symbology=EAN8,
        bar_height=80,
        font_height=24,
        font_width=24,
    )


PROFILES: Dict[str, LayoutProfile] = {
    'code128': LayoutProfile(name='code128', label_width=400, label_height=200),
    'ean8': _ean8_profile(),
    'ean8_rotated': replace(
        _ean8_profile(),
        name='ean8_rotated',
        orientation='R',
        label_width=mm_to_dots(25, DPI),
        label_height=mm_to_dots(50, DPI),
        barcode_origin=(mm_to_dots(3, DPI), mm_to_dots(6, DPI)),
        text_origin=(mm_to_dots(17, DPI), mm_to_dots(6, DPI)),
    ),
    'price_tag': LayoutProfile.from_mm(
        'price_tag', 50, 30,
        barcode_origin_mm=(4, 2),
        text_origin_mm=(4, 14),
        price_origin_mm=(4, 21),
        bar_height=70,
        show_price=True,
    ),
}


def get_profile(name: Optional[str]) -> LayoutProfile:
    """Look up a layout profile by name."""
    profile = PROFILES.get(name or LABEL_PROFILE)
    if not profile:
        raise ValidationError(f'Unknown label profile {name!r}. Valid: {sorted(PROFILES)}')
    return profile


def _first(item: Mapping[str, Any], keys: Iterable[str], money: bool = False) -> Optional[str]:
    for key in keys:
        value = item.get(key)
        if value is None or isinstance(value, bool):
            continue
        if isinstance(value, float):
            if money:
                value = f'{value:.2f}'
            elif value.is_integer():
                value = int(value)
        value = ZPLHandler.field_data(value)
        if value:
            return value
    return None


def barcode_payload(code: str, profile: LayoutProfile) -> Optional[str]:
    """
    Barcode data for a profile.

    EAN-8 always derives the code from the last 6 digits of the input;
    Code128 embeds the input as given. None when nothing can be encoded.
    """
    if profile.symbology == EAN8:
        if not digits_only(code):
            return None
        return ean8_from(code)
    return code


def _barcode_field(payload: str, profile: LayoutProfile) -> str:
    x, y = profile.barcode_origin
    o = profile.orientation
    line = 'Y' if profile.interpretation_line else 'N'

    if profile.symbology == EAN8:
        command = f"^B8{o},{profile.bar_height},{line},N"
    else:
        command = f"^BC{o},{profile.bar_height},{line},N,N"

    return (f"^FO{x},{y}"
            f"^BY{profile.module_width},{profile.ratio:g},{profile.bar_height}"
            f"{command}^FD{payload}^FS")


def _text_field(text: str, origin: Tuple[int, int], height: int, width: int,
                orientation: str) -> str:
    x, y = origin
    return f"^FO{x},{y}^A0{orientation},{height},{width}^FD{text}^FS"


def build_label(item: Mapping[str, Any], profile: LayoutProfile) -> Optional[str]:
    """
    Build one ^XA...^XZ block, or None when the item is unusable.
    """
    if not isinstance(item, Mapping):
        return None

    code = _first(item, CODE_KEYS)
    if not code:
        return None

    payload = barcode_payload(code, profile)
    if not payload:
        return None

    parts = [
        "^XA",
        "^CI28",
        f"^PW{profile.label_width}^LL{profile.label_height}^LH0,0",
    ]

    if profile.debug_box:
        parts.append(f"^FO0,0^GB{profile.label_width},{profile.label_height},2^FS")

    parts.append(_barcode_field(payload, profile))

    name = _first(item, NAME_KEYS)
    if profile.show_name and name:
        parts.append(_text_field(name, profile.text_origin, profile.font_height,
                                 profile.font_width, profile.orientation))

    price = _first(item, PRICE_KEYS, money=True)
    if profile.show_price and price and profile.price_origin:
        parts.append(_text_field(price[:MAX_PRICE_LENGTH], profile.price_origin,
                                 profile.price_font_height, profile.price_font_width,
                                 profile.orientation))

    parts.append("^XZ")
    return ''.join(parts)


def build_labels(items: Iterable[Any], layout: LayoutProfile) -> LabelBatch:
    """
    Build a ZPL batch, one label per item.

    Items without a usable barcode are skipped; the rest still print.
    """
    blocks: List[str] = []
    skipped = 0

    for index, item in enumerate(items or []):
        block = build_label(item, layout)
        if block is None:
            skipped += 1
            logger.warning("Label %d skipped: no usable barcode (%s profile)", index, layout.name)
            continue
        blocks.append(block)

    return LabelBatch(zpl=''.join(blocks), rendered=len(blocks), skipped=skipped)
