from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.api.v1.router import api_router
from app.core.config import create_app
from app.core.errors import (
    DuplicateIdentifierError,
    FieldValidationFailed,
    NotFoundError,
    ProvisioningError,
    StorageNotConfiguredError,
    UploadRejected,
)
from app.core.logging import configure_logging
from app.core.settings import settings

logger = logging.getLogger(__name__)

app = create_app()
configure_logging()

app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


def _inject_bearer_security(app):
    """
    Inyecta bearerAuth globalmente en OpenAPI (solo docs; la seguridad real es
    la de las dependencias de cada endpoint).
    """
    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema

        openapi_schema = get_openapi(
            title=settings.APP_NAME,
            version="1.0.0",
            description="Content models, entries, media and uploads for the admin UI",
            routes=app.routes,
        )
        components = openapi_schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes["bearerAuth"] = {
            "type": "http",
            "scheme": "bearer",
            "bearerFormat": "JWT",
        }
        openapi_schema["security"] = [{"bearerAuth": []}]

        app.openapi_schema = openapi_schema
        return app.openapi_schema

    app.openapi = custom_openapi


# -------- Domain errors -> HTTP --------
@app.exception_handler(DuplicateIdentifierError)
def _duplicate_identifier(request: Request, exc: DuplicateIdentifierError):
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": exc.to_detail()})


@app.exception_handler(FieldValidationFailed)
def _validation_failed(request: Request, exc: FieldValidationFailed):
    return JSONResponse(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, content={"detail": exc.to_detail()})


@app.exception_handler(NotFoundError)
def _not_found(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})


@app.exception_handler(UploadRejected)
def _upload_rejected(request: Request, exc: UploadRejected):
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)})


@app.exception_handler(StorageNotConfiguredError)
def _storage_not_configured(request: Request, exc: StorageNotConfiguredError):
    logger.error("object storage unavailable: %s", exc)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Storage is not configured"})


@app.exception_handler(ProvisioningError)
def _provisioning_failed(request: Request, exc: ProvisioningError):
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"detail": str(exc)})


@app.exception_handler(IntegrityError)
def _integrity_error(request: Request, exc: IntegrityError):
    # a concurrent writer won the uniqueness race; the session is rolled back on close
    logger.warning("integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": "Save failed: conflicting record"})


# OpenAPI con bearer por defecto
_inject_bearer_security(app)

# API privada (JWT)
app.include_router(api_router, prefix=settings.API_V1_STR)
