from fastapi import APIRouter
from app.api.v1.endpoints import auth, users, notes, shares, public_links

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["authentication"])
api_router.include_router(users.router, prefix="/users", tags=["users"])
api_router.include_router(shares.router, prefix="/notes", tags=["sharing"])
api_router.include_router(public_links.router, prefix="/notes", tags=["public links"])
api_router.include_router(notes.router, prefix="/notes", tags=["notes"])
api_router.include_router(public_links.links_router, prefix="/public-links", tags=["public links"])
