from datetime import datetime

import pytest

from rentals.utils.finance import (
    calculate_booking_margin,
    calculate_commission,
    calculate_nights,
    pagination_meta,
)


@pytest.mark.parametrize(
    "check_in, check_out, expected",
    [
        (datetime(2025, 6, 1), datetime(2025, 6, 4), 3),
        (datetime(2025, 6, 1, 15), datetime(2025, 6, 4, 11), 3),
        (datetime(2025, 6, 1, 10), datetime(2025, 6, 1, 12), 1),
        (datetime(2025, 6, 1), datetime(2025, 6, 1), 0),
        (datetime(2025, 6, 4), datetime(2025, 6, 1), 0),
    ],
)
def test_calculate_nights(check_in, check_out, expected):
    assert calculate_nights(check_in, check_out) == expected


def test_calculate_commission():
    assert calculate_commission(1000, 15) == (150.0, 850.0)
    assert calculate_commission(99.99, 3) == (3.0, 96.99)
    assert calculate_commission(0, 15) == (0.0, 0.0)
    assert calculate_commission(None, None) == (0.0, 0.0)


def test_calculate_booking_margin():
    assert calculate_booking_margin(850, 120.5) == 729.5
    assert calculate_booking_margin(None, 10) == -10.0


@pytest.mark.parametrize(
    "total, page, limit, expected",
    [
        (45, 1, 20, {"totalPages": 3, "hasNext": True, "hasPrev": False}),
        (45, 3, 20, {"totalPages": 3, "hasNext": False, "hasPrev": True}),
        (40, 2, 20, {"totalPages": 2, "hasNext": False, "hasPrev": True}),
        (0, 1, 20, {"totalPages": 0, "hasNext": False, "hasPrev": False}),
    ],
)
def test_pagination_meta(total, page, limit, expected):
    assert pagination_meta(total, page, limit) == {
        "total": total,
        "page": page,
        "limit": limit,
        **expected,
    }
