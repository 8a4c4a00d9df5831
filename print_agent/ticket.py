"""
Ticket Layout
=============

Renders receipts (tickets) into fixed-column ESC/POS output: centered
header, dated metadata, line items, right-aligned totals, footer and
optional logo / QR raster blocks. Every ticket ends with a paper cut.
"""

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, List, Mapping, Optional, Union

from .config import COLUMN_WIDTH, MAX_IMAGE_WIDTH
from .errors import DecodeError, ValidationError
from .handlers.escpos import ESCPOSHandler
from .imaging import decode_base64
from .logger import logger

CENTS = Decimal('0.01')
HUNDRED = Decimal('100')

# Amounts and quantities must stay below this so totals fit Decimal precision
MAX_AMOUNT = Decimal('1000000000')

TRUE_VALUES = ('1', 'true', 'yes', 'y', 'on')
FALSE_VALUES = ('0', 'false', 'no', 'n', 'off')

# Captions for the metadata and totals lines
LABELS = {
    'date': 'Date',
    'number': 'Ticket',
    'client': 'Client',
    'subtotal': 'SUBTOTAL',
    'discount': 'DISCOUNT',
    'total': 'TOTAL',
}


# =============================================================================
# Text helpers
# =============================================================================

def center(text: str, width: int = COLUMN_WIDTH) -> str:
    """
    Center text in a column by padding on the left only.

    Text at or beyond the column width is cut to exactly `width` characters.
    """
    if len(text) >= width:
        return text[:width]
    return ' ' * ((width - len(text)) // 2) + text


def right(text: str, width: int = COLUMN_WIDTH) -> str:
    """Right-align text in a column."""
    if len(text) >= width:
        return text[:width]
    return ' ' * (width - len(text)) + text


def money(value: Decimal) -> str:
    """Fixed 2-decimal amount."""
    return str(Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP))


def quantity(value: Decimal) -> str:
    """Quantity without trailing zeros (2, 1.5)."""
    if value == value.to_integral_value():
        return str(int(value))
    return format(value.normalize(), 'f')


def _decimal(value: Any, field_name: str) -> Decimal:
    if isinstance(value, bool):
        raise ValidationError(f"Invalid number for '{field_name}'")
    try:
        number = Decimal(str(value).strip().replace(',', '.'))
    except (InvalidOperation, ValueError):
        raise ValidationError(f"Invalid number for '{field_name}': {value!r}")
    if not number.is_finite():
        raise ValidationError(f"Invalid number for '{field_name}': {value!r}")
    if abs(number) >= MAX_AMOUNT:
        raise ValidationError(f"Number out of range for '{field_name}': {value!r}")
    return number


def _optional_decimal(data: Mapping[str, Any], key: str) -> Optional[Decimal]:
    value = data.get(key)
    if value is None or value == '':
        return None
    return _decimal(value, key)


def _lines(value: Union[str, List[str], None], field_name: str = 'text') -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return value.splitlines()
    if not isinstance(value, list):
        raise ValidationError(f"Field '{field_name}' must be text or a list of lines")
    return [str(line) for line in value]


def _flag(value: Any, field_name: str) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    raise ValidationError(f"Field '{field_name}' must be true or false")


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


# =============================================================================
# Model
# =============================================================================

@dataclass
class TicketItem:
    """One line item."""

    description: str
    quantity: Decimal = Decimal(1)
    unit_price: Optional[Decimal] = None
    discount_percent: Optional[Decimal] = None
    total: Optional[str] = None  # Pre-formatted, used when there is no unit price

    @property
    def line_total(self) -> Optional[Decimal]:
        """quantity x unit price, less the item discount."""
        if self.unit_price is None:
            return None
        amount = self.quantity * self.unit_price
        if self.discount_percent:
            amount -= amount * self.discount_percent / HUNDRED
        return amount.quantize(CENTS, rounding=ROUND_HALF_UP)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], index: int = 0) -> 'TicketItem':
        if not isinstance(data, Mapping):
            raise ValidationError(f'Item {index} must be an object')

        description = _text(data.get('description', data.get('descripcion')))
        if not description:
            raise ValidationError(f"Item {index}: 'description' required")

        qty = _optional_decimal(data, 'quantity')
        return cls(
            description=description,
            quantity=Decimal(1) if qty is None else qty,
            unit_price=_optional_decimal(data, 'unit_price'),
            discount_percent=_optional_decimal(data, 'discount_percent'),
            total=_text(data.get('total')),
        )


@dataclass
class TicketModel:
    """Receipt contents."""

    items: List[TicketItem] = field(default_factory=list)
    header: List[str] = field(default_factory=list)
    footer: List[str] = field(default_factory=list)
    logo: Optional[str] = None  # base64 image
    qr: Optional[str] = None  # base64 image
    date: Optional[str] = None
    number: Optional[str] = None
    client: Optional[str] = None

    # Supplied totals, printed verbatim when compute_totals is off
    subtotal: Optional[str] = None
    discount: Optional[str] = None
    total: Optional[str] = None

    discount_rate: Optional[Decimal] = None  # Global discount, percent
    compute_totals: bool = True

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'TicketModel':
        """
        Parse a request body.

        Raises:
            ValidationError: missing items or malformed numbers
        """
        if not isinstance(data, Mapping):
            raise ValidationError('Ticket must be an object')

        raw_items = data.get('items')
        if not isinstance(raw_items, list) or not raw_items:
            raise ValidationError("Ticket requires a non-empty 'items' list")

        items = [TicketItem.from_dict(item, i) for i, item in enumerate(raw_items)]

        compute = data.get('compute_totals')
        if compute is None:
            compute = any(item.unit_price is not None for item in items)
        else:
            compute = _flag(compute, 'compute_totals')

        return cls(
            items=items,
            header=_lines(data.get('header'), 'header'),
            footer=_lines(data.get('footer'), 'footer'),
            logo=_text(data.get('logo')),
            qr=_text(data.get('qr')),
            date=_text(data.get('date')),
            number=_text(data.get('number', data.get('ticket_number'))),
            client=_text(data.get('client')),
            subtotal=_text(data.get('subtotal')),
            discount=_text(data.get('discount')),
            total=_text(data.get('total')),
            discount_rate=_optional_decimal(data, 'discount_rate'),
            compute_totals=compute,
        )

    def totals(self) -> Dict[str, Decimal]:
        """Subtotal, discount amount and final total from the line items."""
        subtotal = sum((item.line_total or Decimal(0) for item in self.items), Decimal(0))
        discount = Decimal(0)
        if self.discount_rate:
            discount = (subtotal * self.discount_rate / HUNDRED).quantize(CENTS, rounding=ROUND_HALF_UP)
        return {
            'subtotal': subtotal,
            'discount': discount,
            'total': subtotal - discount,
        }


# =============================================================================
# Layout
# =============================================================================

class TicketLayout:
    """
    Fixed-column ticket renderer.

    Optional images that fail to decode are left out; each omission is
    logged and recorded in `warnings`.
    """

    def __init__(self, column_width: int = COLUMN_WIDTH,
                 max_image_width: int = MAX_IMAGE_WIDTH,
                 handler: Optional[ESCPOSHandler] = None):
        if column_width < 4:
            raise ValidationError(f'Column width too small: {column_width}')
        self.column_width = column_width
        self.max_image_width = max_image_width
        self.escpos = handler or ESCPOSHandler()
        self.warnings: List[str] = []

    def center(self, text: str) -> str:
        return center(text, self.column_width)

    def right(self, text: str) -> str:
        return right(text, self.column_width)

    def description(self, text: str) -> str:
        """Item description, shortened with '...' when it overflows."""
        if len(text) > self.column_width:
            return text[:self.column_width - 3] + '...'
        return text

    def item_lines(self, item: TicketItem) -> List[str]:
        """Description line plus the 'qty x unit [-disc%]   total' line."""
        lines = [self.description(item.description)]

        line_total = item.line_total
        if line_total is not None:
            fragment = f"{quantity(item.quantity)} x {money(item.unit_price)}"
            if item.discount_percent:
                fragment += f" -{quantity(item.discount_percent)}%"
            amount = money(line_total)
        elif item.total:
            fragment = quantity(item.quantity)
            amount = item.total
        else:
            return lines

        pad = self.column_width - len(fragment) - len(amount)
        if pad < 1:
            # No room for both: amount goes flush right on its own line
            lines.append(fragment[:self.column_width])
            lines.append(self.right(amount))
        else:
            lines.append(fragment + ' ' * pad + amount)
        return lines

    def total_lines(self, model: TicketModel) -> List[str]:
        if model.compute_totals:
            totals = model.totals()
            lines = [f"{LABELS['subtotal']}: {money(totals['subtotal'])}"]
            if model.discount_rate:
                lines.append(f"{LABELS['discount']} ({quantity(model.discount_rate)}%): "
                             f"-{money(totals['discount'])}")
            lines.append(f"{LABELS['total']}: {money(totals['total'])}")
        else:
            lines = [
                f"{LABELS[key]}: {value}"
                for key, value in (('subtotal', model.subtotal),
                                   ('discount', model.discount),
                                   ('total', model.total))
                if value
            ]
        return [self.right(line) for line in lines]

    def _image(self, data: str) -> bytes:
        image = decode_base64(data, max_width=self.max_image_width)
        return (self.escpos.ALIGN_CENTER
                + self.escpos.encode_raster(image)
                + self.escpos.ALIGN_LEFT)

    def _optional_image(self, name: str, data: Optional[str]) -> bytes:
        if not data:
            return b''
        try:
            return self._image(data)
        except (DecodeError, ValidationError) as e:
            message = f'{name} skipped: {e.message}'
            self.warnings.append(message)
            logger.warning("Ticket %s", message)
            return b''

    def _text_block(self, lines: List[str]) -> bytes:
        return b''.join(self.escpos.line(self.center(line)) for line in lines)

    def render(self, model: TicketModel) -> bytes:
        """Render a ticket to ESC/POS bytes, ending with a cut."""
        self.warnings = []
        width = self.column_width
        escpos = self.escpos

        data = bytearray()
        data.extend(escpos.INIT)
        data.extend(self._optional_image('logo', model.logo))
        data.extend(self._text_block(model.header))
        data.extend(escpos.line('=' * width))

        for key in ('date', 'number', 'client'):
            value = getattr(model, key)
            if value:
                data.extend(escpos.line(f"{LABELS[key]}: {value}"[:width]))
        data.extend(escpos.line('-' * width))

        for item in model.items:
            for line in self.item_lines(item):
                data.extend(escpos.line(line))
        data.extend(escpos.line('-' * width))

        for line in self.total_lines(model):
            data.extend(escpos.line(line))
        data.extend(escpos.line('=' * width))

        data.extend(self._text_block(model.footer))
        data.extend(self._optional_image('qr', model.qr))
        data.extend(escpos.feed(4))
        data.extend(escpos.CUT)
        return bytes(data)

    def render_qr(self, qr: str, text_top: Union[str, List[str], None] = None,
                  text_bottom: Union[str, List[str], None] = None) -> bytes:
        """
        QR image between two centered text blocks.

        Raises:
            ValidationError: no QR image
            DecodeError: the QR image is malformed
        """
        if not qr:
            raise ValidationError("Missing field 'qr'")

        self.warnings = []
        data = bytearray()
        data.extend(self.escpos.INIT)
        data.extend(self._text_block(_lines(text_top)))
        data.extend(self._image(qr))
        data.extend(self._text_block(_lines(text_bottom)))
        data.extend(self.escpos.feed(4))
        data.extend(self.escpos.CUT)
        return bytes(data)


def render(model: TicketModel, column_width: int = COLUMN_WIDTH) -> bytes:
    """Render a ticket with the default layout."""
    return TicketLayout(column_width).render(model)
