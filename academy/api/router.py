from fastapi import APIRouter

from academy.api import auth, gamification, system

api_router = APIRouter()
api_router.include_router(system.router)
api_router.include_router(auth.router)
api_router.include_router(gamification.router)
