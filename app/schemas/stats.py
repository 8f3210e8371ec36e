# app/schemas/stats.py
# Platform-wide counters for the landing page

from pydantic import BaseModel


class PlatformStats(BaseModel):
    teachers: int
    students: int
    active_lessons: int
    subjects: int
