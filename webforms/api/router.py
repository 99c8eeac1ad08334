from fastapi import APIRouter

from webforms.api.routes import contact, newsletter

api_router = APIRouter()

# 🔓 Public form routes
api_router.include_router(contact.router)
api_router.include_router(newsletter.router)
