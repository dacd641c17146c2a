# app/api/v1/router.py
from fastapi import APIRouter

from .endpoints import health
from app.api.v1.endpoints import bootstrap as bootstrap_endpoints
from app.api.v1.endpoints import content_entries as entries_endpoints
from app.api.v1.endpoints import content_models as models_endpoints
from app.api.v1.endpoints import media as media_endpoints
from app.api.v1.endpoints import pages as pages_endpoints
from app.api.v1.endpoints import posts as posts_endpoints
from app.api.v1.endpoints import uploads as uploads_endpoints
from app.api.v1.endpoints import users as users_endpoints
from app.api.v1 import auth as auth_endpoints

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(auth_endpoints.router, prefix="/auth")

# Admin core para la UI
api_router.include_router(models_endpoints.router)     # /content/models, /content/field-types
api_router.include_router(entries_endpoints.router)    # /content/entries, /content/references
api_router.include_router(media_endpoints.router)      # /media
api_router.include_router(uploads_endpoints.router)    # /uploads/presign
api_router.include_router(pages_endpoints.router)      # /pages
api_router.include_router(posts_endpoints.router)      # /posts
api_router.include_router(users_endpoints.router)      # /users/me
api_router.include_router(bootstrap_endpoints.router)  # /setup/admin
