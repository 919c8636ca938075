from fastapi import APIRouter

from aclio.api.v1.routes import chat, planner

api_router = APIRouter()

api_router.include_router(planner.router, tags=["planner"])
api_router.include_router(chat.router, tags=["chat"])
