"""
Marketer commission split: 40% available (floored to whole units), rest withheld.
"""

from decimal import Decimal

import pytest

from wallet.services import split_commission


@pytest.mark.parametrize('total,available,withheld', [
    (Decimal('20000'), Decimal('8000.00'), Decimal('12000.00')),
    (Decimal('101'), Decimal('40.00'), Decimal('61.00')),
    (Decimal('1'), Decimal('0.00'), Decimal('1.00')),
    (Decimal('0'), Decimal('0.00'), Decimal('0.00')),
    (Decimal('2.50'), Decimal('1.00'), Decimal('1.50')),
])
def test_split_values(total, available, withheld):
    assert split_commission(total) == (available, withheld)


@pytest.mark.parametrize('total', ['0.01', '3', '99.99', '12345.67', '1000000'])
def test_split_parts_add_up_to_total(total):
    available, withheld = split_commission(Decimal(total))
    assert available + withheld == Decimal(total)
    assert available == available.to_integral_value()
    assert available <= Decimal(total) * Decimal('0.4')
    assert withheld >= 0
