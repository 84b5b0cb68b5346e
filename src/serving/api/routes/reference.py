"""
Reference Data Endpoints

Store and channel lists used to populate dashboard filters.
"""

from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.analytics import queries
from src.analytics.schemas import ChannelInfo, StoreInfo
from src.database.connection import get_db_dependency

router = APIRouter()


@router.get("/stores", response_model=List[StoreInfo])
async def list_stores(db: AsyncSession = Depends(get_db_dependency)) -> List[StoreInfo]:
    """Active stores, alphabetical."""
    return await queries.get_stores(db)


@router.get("/channels", response_model=List[ChannelInfo])
async def list_channels(db: AsyncSession = Depends(get_db_dependency)) -> List[ChannelInfo]:
    """All channels, alphabetical."""
    return await queries.get_channels(db)
