import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from church_api.config import settings
from church_api.core.logging_config import configure_logging
from church_api.core.exceptions import (
    ChurchApiException,
    UnauthorizedException,
    NotFoundException,
    ForbiddenException,
    ValidationException,
)
# Import all model classes to ensure they're registered with SQLAlchemy
from church_api.models import branch, church, member, permission, position  # noqa: F401
from church_api.routes import member_routes, permission_routes

configure_logging()
logger = logging.getLogger(__name__)

# InvalidRoleError and UnknownPermissionError resolve through ValidationException
ERROR_STATUS = {
    UnauthorizedException: status.HTTP_401_UNAUTHORIZED,
    ForbiddenException: status.HTTP_403_FORBIDDEN,
    NotFoundException: status.HTTP_404_NOT_FOUND,
    ValidationException: status.HTTP_400_BAD_REQUEST,
}

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    docs_url="/docs" if settings.DEBUG else None,  # Disable in production
    redoc_url="/redoc" if settings.DEBUG else None,
)

cors_origins = settings.cors_origins_list
if cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def _status_for(exc: ChurchApiException) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS:
            return ERROR_STATUS[cls]
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@app.exception_handler(ChurchApiException)
async def church_api_exception_handler(request: Request, exc: ChurchApiException):
    """
    Translate domain exceptions to JSON errors.

    403 bodies also carry the machine-readable ``reason`` and its ``details``
    (e.g. the restricted permission names that were refused).
    """
    content = {"detail": str(exc)}
    headers = None
    if isinstance(exc, ForbiddenException):
        content["reason"] = exc.reason
        content["details"] = exc.details
    elif isinstance(exc, UnauthorizedException):
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=_status_for(exc), content=content, headers=headers)


@app.exception_handler(RequestValidationError)
async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Dados inválidos", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error at %s", request.url, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Erro interno do servidor"},
    )


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}


@app.get("/")
async def root():
    return {
        "message": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "docs": "/docs" if settings.DEBUG else "Documentation disabled in production",
    }


app.include_router(member_routes.router, prefix="/api/members", tags=["Members"])
app.include_router(permission_routes.router, prefix="/api/permissions", tags=["Permissions"])
