from fastapi import APIRouter
from app.api.endpoints import waitlist

api_router = APIRouter()

api_router.include_router(waitlist.router)
