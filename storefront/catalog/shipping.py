from __future__ import annotations

from typing import Any, Dict

STANDARD_COST = 500
FREE_SHIPPING_THRESHOLD = 10000
CURRENCY = "PKR"


def quote_shipping(order_total: float) -> Dict[str, Any]:
    """Standard nationwide delivery, free above the threshold."""
    cost = 0 if order_total >= FREE_SHIPPING_THRESHOLD else STANDARD_COST
    return {
        "methods": [
            {
                "method_id": "standard",
                "name": "Standard Delivery",
                "cost": cost,
                "estimated_days": 3,
                "description": "Standard nationwide delivery",
            }
        ],
        "total_cost": cost,
        "currency": CURRENCY,
    }
