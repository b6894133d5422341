"""Booking financial and listing helpers shared by the API and the calendar importer"""

import math
from datetime import datetime


def calculate_nights(check_in: datetime, check_out: datetime) -> int:
    """Whole days between check-in and check-out, rounded up and never negative"""
    days = (check_out - check_in).total_seconds() / 86400
    return max(0, math.ceil(days))


def calculate_commission(gross_revenue: float, commission_rate: float) -> tuple[float, float]:
    """
    Split gross revenue into channel commission and net revenue.

    Args:
        gross_revenue: Amount paid by the guest
        commission_rate: Channel commission in percent (15 means 15%)

    Returns:
        (commission_amount, net_revenue), both rounded to cents
    """
    gross = float(gross_revenue or 0)
    commission = gross * float(commission_rate or 0) / 100
    return round(commission, 2), round(gross - commission, 2)


def calculate_booking_margin(net_revenue: float, variable_costs: float) -> float:
    return round(float(net_revenue or 0) - float(variable_costs or 0), 2)


def pagination_meta(total: int, page: int, limit: int) -> dict:
    total_pages = math.ceil(total / limit) if limit else 0
    return {
        "total": total,
        "page": page,
        "limit": limit,
        "totalPages": total_pages,
        "hasNext": page < total_pages,
        "hasPrev": page > 1,
    }
