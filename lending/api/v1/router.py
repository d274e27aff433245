"""
Router principal da API v1.

Inclui todos os routers de endpoints.
"""

from fastapi import APIRouter

from lending.api.v1.books import router as books_router
from lending.api.v1.loans import router as loans_router
from lending.api.v1.members import router as members_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(members_router)
api_router.include_router(books_router)
api_router.include_router(loans_router)
