"""
Stats API

Machine-readable streak and completion figures for every user.
"""
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from core.database import get_db
from schemas import StatsResponse
from services.activity_analytics import build_stats_payload

router = APIRouter(prefix="/api", tags=["stats"])


@router.get("/stats", response_model=StatsResponse)
async def get_stats(db: Session = Depends(get_db)):
    """
    Example:
        {"generated_at": "2024-04-05T09:30:00.000Z",
         "data": [{"name": "Halit", "streak": 2,
                   "completion7": {"totalDays": 7, "completedDays": 2, "percent": 29}, ...}]}
    """
    return build_stats_payload(db)
