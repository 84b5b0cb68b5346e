"""
Report Schemas

Response shapes of the analytics reports. Field names are part of the public
JSON contract consumed by the dashboard.
"""

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class Overview(BaseModel):
    """Headline metrics for a period"""
    total_sales: int
    completed_sales: int
    cancelled_sales: int
    avg_ticket: float
    total_revenue: float
    total_discounts: float
    cancellation_rate: float


class DailySales(BaseModel):
    """Completed sales for one calendar day"""
    date: date
    total_sales: int
    revenue: float


class ProductPerformance(BaseModel):
    """Product ranking row"""
    product_name: str
    times_sold: int
    total_quantity: float
    total_revenue: float
    avg_price: float


class ChannelPerformance(BaseModel):
    """Sales channel row"""
    channel_name: str
    channel_type: Optional[str]
    total_sales: int
    revenue: float
    avg_ticket: float
    avg_delivery_minutes: Optional[float]


class HourlySales(BaseModel):
    """Completed sales for one hour of the day"""
    hour: int
    total_sales: int
    revenue: float


class WeekdaySales(BaseModel):
    """Completed sales for one day of the week, 0 is Sunday"""
    weekday: int
    weekday_name: str
    total_sales: int
    revenue: float


class CustomerValue(BaseModel):
    """Top customer row"""
    customer_name: Optional[str]
    email: Optional[str]
    total_purchases: int
    lifetime_value: float
    avg_ticket: float
    last_purchase: datetime


class InactiveCustomer(BaseModel):
    """Recurring customer who stopped buying"""
    customer_name: Optional[str]
    email: Optional[str]
    phone_number: Optional[str]
    total_purchases: int
    lifetime_value: float
    last_purchase: datetime
    days_since_purchase: int


class StoreInfo(BaseModel):
    """Store reference row"""
    id: int
    name: str
    city: Optional[str]
    state: Optional[str]
    is_active: bool

    model_config = ConfigDict(from_attributes=True)


class ChannelInfo(BaseModel):
    """Channel reference row"""
    id: int
    name: str
    type: Optional[str]

    model_config = ConfigDict(from_attributes=True)
