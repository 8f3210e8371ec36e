# app/api/v1/endpoints/stats.py
#
#   GET /stats/   → platform counters (public)

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.session import get_db
from app.schemas.stats import PlatformStats
from app.services import stats_service

router = APIRouter()


@router.get("/", response_model=PlatformStats, summary="Platform counters (public)")
def platform_stats(db: Session = Depends(get_db)):
    return stats_service.get_platform_stats(db)
