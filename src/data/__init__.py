"""
Data Generation Module
"""
from .generators import RestaurantDataGenerator, generate_dataset

__all__ = [
    "RestaurantDataGenerator",
    "generate_dataset",
]
