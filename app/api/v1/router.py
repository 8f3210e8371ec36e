# app/api/v1/router.py
# Master router -- registers all endpoint routers under /api/v1
# Each endpoint module registers its own router; prefixes and tags live here

from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    profiles,
    subjects,
    lessons,
    bookings,
    transactions,
    reviews,
    stats,
)

api_router = APIRouter()

# Identity provider integration
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])

# Profiles
api_router.include_router(profiles.router, prefix="/profiles", tags=["Profiles"])

# Catalog
api_router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
api_router.include_router(lessons.router, prefix="/lessons", tags=["Lessons"])

# Bookings & Payments
api_router.include_router(bookings.router, prefix="/bookings", tags=["Bookings"])
api_router.include_router(transactions.router, prefix="/transactions", tags=["Transactions"])

# Reviews
api_router.include_router(reviews.router, prefix="/reviews", tags=["Reviews"])

# Landing page counters
api_router.include_router(stats.router, prefix="/stats", tags=["Stats"])
