"""
Data Ingestion Module
"""
from .seed_db import seed_database

__all__ = [
    "seed_database",
]
