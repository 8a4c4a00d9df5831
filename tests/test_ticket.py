import logging
from decimal import Decimal

import pytest

from print_agent.errors import DecodeError, ValidationError
from print_agent.handlers import ESCPOSHandler
from print_agent.ticket import (
    TicketItem, TicketLayout, TicketModel, center, money, quantity, render, right,
)

from .fakes import png_base64

W = 30


def ticket(**extra):
    data = {
        'header': ['MY SHOP', 'Main St 1'],
        'date': '2026-10-18',
        'number': 'A-0001',
        'client': 'Walk-in',
        'items': [
            {'description': 'Coffee', 'quantity': 2, 'unit_price': '1.50'},
            {'description': 'Cake', 'quantity': 1, 'unit_price': 3, 'discount_percent': 10},
        ],
        'discount_rate': 5,
        'footer': 'Thank you!',
    }
    data.update(extra)
    return TicketModel.from_dict(data)


def line(text):
    return b'\n' + text.encode() + b'\n'


# =============================================================================
# Text helpers
# =============================================================================

def test_center_pads_left_only():
    assert center('HI', 10) == '    HI'
    assert center('ABC', 10) == '   ABC'


@pytest.mark.parametrize('text', ['', 'a', 'odd', 'exactly ten', 'x' * 9])
def test_center_keeps_text(text):
    result = center(text, 10)
    if len(text) >= 10:
        assert len(result) == 10
    else:
        assert result.lstrip(' ') == text.lstrip(' ')
        assert result.endswith(text)


def test_center_truncates():
    assert center('ABCDEFGHIJKL', 10) == 'ABCDEFGHIJ'
    assert center('ABCDEFGHIJ', 10) == 'ABCDEFGHIJ'


def test_right():
    assert right('TOTAL: 1.00', 15) == '    TOTAL: 1.00'
    assert right('X' * 20, 15) == 'X' * 15


def test_money_and_quantity():
    assert money(Decimal('2.005')) == '2.01'
    assert money(Decimal(3)) == '3.00'
    assert quantity(Decimal('2.0')) == '2'
    assert quantity(Decimal('1.50')) == '1.5'


# =============================================================================
# Items and totals
# =============================================================================

def test_long_description_is_shortened():
    layout = TicketLayout(10)
    assert layout.description('ABCDEFGHIJK') == 'ABCDEFG...'
    assert layout.description('ABCDEFGHIJ') == 'ABCDEFGHIJ'


def test_item_line_lands_flush_right():
    layout = TicketLayout(W)
    item = TicketItem('Coffee', Decimal(2), Decimal('1.50'))
    desc, amounts = layout.item_lines(item)
    assert desc == 'Coffee'
    assert len(amounts) == W
    assert amounts.startswith('2 x 1.50 ')
    assert amounts.endswith(' 3.00')


def test_item_discount():
    item = TicketItem('Cake', Decimal(1), Decimal(3), Decimal(10))
    assert item.line_total == Decimal('2.70')
    assert TicketLayout(W).item_lines(item)[1].startswith('1 x 3.00 -10%')


def test_wide_item_line_wraps_amount():
    layout = TicketLayout(16)
    item = TicketItem('x', Decimal(12), Decimal('123.45'), Decimal(15))
    lines = layout.item_lines(item)
    assert lines == ['x', '12 x 123.45 -15%', right('1259.19', 16)]
    assert all(len(text) <= 16 for text in lines)


def test_item_without_price_uses_supplied_total():
    item = TicketItem('Gift', Decimal(1), total='0.00')
    assert TicketLayout(W).item_lines(item)[1].endswith(' 0.00')
    assert TicketLayout(W).item_lines(TicketItem('Note'))[0] == 'Note'


def test_computed_totals():
    totals = ticket().totals()
    assert totals['subtotal'] == Decimal('5.70')
    assert totals['discount'] == Decimal('0.29')
    assert totals['total'] == Decimal('5.41')


def test_supplied_totals_are_used_verbatim():
    model = ticket(compute_totals=False, subtotal='99.00', total='88.00')
    lines = TicketLayout(W).total_lines(model)
    assert lines == [right('SUBTOTAL: 99.00', W), right('TOTAL: 88.00', W)]


# =============================================================================
# Rendering
# =============================================================================

def test_render_layout():
    data = render(ticket(), column_width=W)

    assert data.startswith(ESCPOSHandler.INIT)
    assert data.endswith(ESCPOSHandler.CUT)
    assert center('MY SHOP', W).encode() + b'\n' in data
    assert line('Date: 2026-10-18') in data
    assert line('Ticket: A-0001') in data
    assert line('2 x 1.50' + ' ' * 18 + '3.00') in data
    assert line(right('SUBTOTAL: 5.70', W)) in data
    assert line(right('DISCOUNT (5%): -0.29', W)) in data
    assert line(right('TOTAL: 5.41', W)) in data
    assert line(center('Thank you!', W)) in data


def test_render_embeds_logo_raster():
    layout = TicketLayout(W)
    data = layout.render(ticket(logo=png_base64((16, 4))))
    assert data.count(b'\x1b\x2a\x21\x02\x00\xff\xff\x0a') == 4
    assert layout.warnings == []


def test_bad_logo_is_skipped_with_warning(caplog):
    layout = TicketLayout(W)
    with caplog.at_level(logging.WARNING, logger='print_agent'):
        data = layout.render(ticket(logo='not-an-image!!'))

    assert data.endswith(ESCPOSHandler.CUT)
    assert b'\x1b\x2a\x21' not in data
    assert len(layout.warnings) == 1
    assert layout.warnings[0].startswith('logo skipped')
    assert 'logo skipped' in caplog.text


def test_bad_qr_section_is_skipped():
    layout = TicketLayout(W)
    layout.render(ticket(qr=png_base64()[:20]))
    assert layout.warnings and layout.warnings[0].startswith('qr skipped')


def test_wide_logo_is_scaled_to_paper():
    layout = TicketLayout(W, max_image_width=64)
    data = layout.render(ticket(logo=png_base64((128, 8))))
    # 64 px wide -> 8 bytes per row, 4 rows after scaling
    assert data.count(b'\x1b\x2a\x21\x08\x00') == 4


@pytest.mark.parametrize('body', [
    {},
    {'items': []},
    {'items': [{'quantity': 1}]},
    {'items': [{'description': 'x', 'quantity': 'two'}]},
    {'items': [{'description': 'x', 'unit_price': True}]},
    {'items': ['x']},
    {'items': [{'description': 'x'}], 'header': 5},
    {'items': [{'description': 'x'}], 'footer': {'a': 1}},
    {'items': [{'description': 'x'}], 'compute_totals': 'maybe'},
    {'items': [{'description': 'x', 'unit_price': '1e30'}]},
    {'items': [{'description': 'x', 'quantity': -1e12}]},
])
def test_invalid_ticket(body):
    with pytest.raises(ValidationError):
        TicketModel.from_dict(body)


def test_qr_ticket():
    layout = TicketLayout(W)
    data = layout.render_qr(png_base64((8, 8)), 'Scan me', ['line 1', 'line 2'])
    assert ESCPOSHandler.INIT + center('Scan me', W).encode() + b'\n' in data
    assert data.count(b'\x1b\x2a\x21\x01\x00\xff\x0a') == 8
    assert line(center('line 2', W)) in data
    assert data.endswith(ESCPOSHandler.CUT)


def test_qr_is_required():
    with pytest.raises(ValidationError):
        TicketLayout(W).render_qr('', 'top', 'bottom')
    with pytest.raises(DecodeError):
        TicketLayout(W).render_qr('bm90IGFuIGltYWdl', 'top', 'bottom')


@pytest.mark.parametrize('value, expected', [
    ('false', False), ('0', False), (False, False), ('yes', True), (True, True),
])
def test_compute_totals_flag(value, expected):
    model = ticket(compute_totals=value)
    assert model.compute_totals is expected
