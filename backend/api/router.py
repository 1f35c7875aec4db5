from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_current_user
from api.routes import grading, timetable


api_router = APIRouter()

# Every route needs an authenticated profile; mutations additionally require an admin.
_authenticated = [Depends(get_current_user)]
api_router.include_router(timetable.router, prefix="/timetable", tags=["timetable"], dependencies=_authenticated)
api_router.include_router(grading.router, prefix="/grading", tags=["grading"], dependencies=_authenticated)
