"""
Synthetic Data Generator

Generates a realistic restaurant sales dataset for development and demos:
- Stores across Brazilian cities
- Counter and delivery channels
- Customers, a fraction of them recurring
- Sales with lunch/dinner peaks, cancellations and delivery times
- Product line items
"""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

import numpy as np
import polars as pl
from faker import Faker


# =============================================================================
# CONFIGURATION
# =============================================================================

CHANNELS = [
    ("Presencial", "P"),
    ("iFood", "D"),
    ("Rappi", "D"),
    ("Uber Eats", "D"),
    ("WhatsApp", "D"),
    ("App Próprio", "D"),
]
CHANNEL_WEIGHTS = [0.40, 0.25, 0.10, 0.10, 0.10, 0.05]

MENU = [
    ("X-Burger", 24.90),
    ("X-Salada", 27.90),
    ("X-Bacon", 31.90),
    ("Batata Frita Média", 14.90),
    ("Batata Frita Grande", 19.90),
    ("Onion Rings", 17.90),
    ("Refrigerante Lata", 6.50),
    ("Suco Natural", 9.90),
    ("Milk Shake", 16.90),
    ("Combo Família", 89.90),
    ("Pizza Margherita", 49.90),
    ("Pizza Calabresa", 52.90),
    ("Salada Caesar", 29.90),
    ("Brownie", 12.90),
    ("Água Mineral", 4.50),
]

CITIES = [
    ("São Paulo", "SP"),
    ("Rio de Janeiro", "RJ"),
    ("Belo Horizonte", "MG"),
    ("Curitiba", "PR"),
    ("Porto Alegre", "RS"),
    ("Salvador", "BA"),
    ("Recife", "PE"),
    ("Fortaleza", "CE"),
]

# Relative order volume per hour of day: lunch and dinner peaks
HOUR_WEIGHTS = np.array([
    0.2, 0.1, 0.05, 0.05, 0.05, 0.1, 0.3, 0.6,
    0.8, 1.0, 1.5, 4.0, 6.0, 5.0, 2.0, 1.2,
    1.2, 1.8, 4.0, 6.5, 7.0, 5.0, 2.5, 0.8,
])
HOUR_WEIGHTS = HOUR_WEIGHTS / HOUR_WEIGHTS.sum()


# =============================================================================
# GENERATORS
# =============================================================================

class RestaurantDataGenerator:
    """
    Generate a consistent set of restaurant tables.

    Args:
        seed: Random seed, the same seed always yields the same dataset
        cancellation_rate: Share of sales marked CANCELLED
        registered_share: Share of sales linked to a customer
    """

    def __init__(
        self,
        seed: int = 42,
        cancellation_rate: float = 0.05,
        registered_share: float = 0.7,
    ):
        self.rng = np.random.default_rng(seed)
        self.fake = Faker("pt_BR")
        self.fake.seed_instance(seed)
        self.cancellation_rate = cancellation_rate
        self.registered_share = registered_share

    def stores(self, n: int = 10) -> pl.DataFrame:
        cities = [CITIES[i % len(CITIES)] for i in range(n)]
        return pl.DataFrame({
            "id": list(range(1, n + 1)),
            "name": [f"Loja {city} {i + 1:02d}" for i, (city, _) in enumerate(cities)],
            "city": [city for city, _ in cities],
            "state": [state for _, state in cities],
            # Roughly one store in ten is closed
            "is_active": (self.rng.random(n) > 0.1).tolist(),
        })

    def channels(self) -> pl.DataFrame:
        return pl.DataFrame({
            "id": list(range(1, len(CHANNELS) + 1)),
            "name": [name for name, _ in CHANNELS],
            "type": [kind for _, kind in CHANNELS],
        })

    def customers(self, n: int = 2000) -> pl.DataFrame:
        return pl.DataFrame({
            "id": list(range(1, n + 1)),
            "customer_name": [self.fake.name() for _ in range(n)],
            "email": [self.fake.email() for _ in range(n)],
            "phone_number": [self.fake.phone_number() for _ in range(n)],
        })

    def products(self) -> pl.DataFrame:
        return pl.DataFrame({
            "id": list(range(1, len(MENU) + 1)),
            "name": [name for name, _ in MENU],
        })

    def sales(
        self,
        n: int,
        n_stores: int,
        n_customers: int,
        days: int = 180,
        end: Optional[datetime] = None,
    ) -> Dict[str, pl.DataFrame]:
        """
        Generate ``n`` sales spread over the ``days`` days before ``end``.

        Returns:
            Dict with ``sales`` and ``product_sales`` frames
        """
        end = end or datetime.now().replace(minute=0, second=0, microsecond=0)
        start_day = (end - timedelta(days=days)).replace(hour=0, minute=0, second=0, microsecond=0)

        day_offsets = self.rng.integers(0, days, n)
        hours = self.rng.choice(24, size=n, p=HOUR_WEIGHTS)
        minutes = self.rng.integers(0, 60, n)
        created_at = [
            start_day + timedelta(days=int(d), hours=int(h), minutes=int(m))
            for d, h, m in zip(day_offsets, hours, minutes)
        ]

        store_ids = self.rng.integers(1, n_stores + 1, n)
        channel_ids = self.rng.choice(len(CHANNELS), size=n, p=CHANNEL_WEIGHTS) + 1
        has_customer = self.rng.random(n) < self.registered_share
        # Skewed towards low ids so some customers become recurring buyers
        customer_ids = np.minimum(self.rng.geometric(1 / max(n_customers / 8, 1), n), n_customers)
        statuses = np.where(self.rng.random(n) < self.cancellation_rate, "CANCELLED", "COMPLETED")

        prices = np.array([price for _, price in MENU])
        line_items: List[dict] = []
        totals = np.zeros(n)
        for sale_index in range(n):
            n_items = int(self.rng.integers(1, 5))
            product_idx = self.rng.choice(len(MENU), size=n_items, replace=False)
            quantities = self.rng.integers(1, 4, n_items)
            for idx, qty in zip(product_idx, quantities):
                price = round(float(prices[idx]) * int(qty), 2)
                totals[sale_index] += price
                line_items.append({
                    "id": len(line_items) + 1,
                    "sale_id": sale_index + 1,
                    "product_id": int(idx) + 1,
                    "quantity": float(qty),
                    "total_price": price,
                })

        discounts = np.where(self.rng.random(n) < 0.15, np.round(totals * 0.10, 2), 0.0)
        is_delivery = np.array([CHANNELS[c - 1][1] == "D" for c in channel_ids])
        delivery_seconds = np.clip(self.rng.normal(35 * 60, 10 * 60, n), 10 * 60, None).astype(int)

        sales = pl.DataFrame({
            "id": list(range(1, n + 1)),
            "store_id": store_ids.tolist(),
            "channel_id": channel_ids.tolist(),
            "customer_id": [int(c) if has else None for c, has in zip(customer_ids, has_customer)],
            "created_at": created_at,
            "sale_status_desc": statuses.tolist(),
            "total_amount": np.round(totals - discounts, 2).tolist(),
            "total_discount": discounts.tolist(),
            "delivery_seconds": [int(s) if d else None for s, d in zip(delivery_seconds, is_delivery)],
        })

        return {
            "sales": sales,
            "product_sales": pl.DataFrame(line_items),
        }


def generate_dataset(
    n_sales: int = 10000,
    n_stores: int = 10,
    n_customers: int = 2000,
    days: int = 180,
    end: Optional[datetime] = None,
    seed: int = 42,
) -> Dict[str, pl.DataFrame]:
    """
    Generate every table of the restaurant schema.

    Returns:
        Dict of table name to DataFrame, in foreign-key load order
    """
    generator = RestaurantDataGenerator(seed=seed)
    frames = {
        "stores": generator.stores(n_stores),
        "channels": generator.channels(),
        "customers": generator.customers(n_customers),
        "products": generator.products(),
    }
    frames.update(generator.sales(n_sales, n_stores, n_customers, days=days, end=end))
    return frames
