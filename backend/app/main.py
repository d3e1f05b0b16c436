import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import settings, require_jwt_secret
from app.core.errors import AppError, AuthenticationError, ValidationError
from app.routes.auth import router as auth_router
from app.routes.passports import router as passports_router

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

require_jwt_secret()

app = FastAPI(title="Implant Passport")
logger.info(
    "Startup config: ENV=%s token_ttl_minutes=%s cors_origins=%s",
    settings.ENV,
    settings.ACCESS_TOKEN_EXPIRE_MINUTES,
    len(settings.CORS_ORIGINS),
)

_ERROR_CODE_BY_STATUS: dict[int, str] = {
    400: "VALIDATION_ERROR",
    401: "UNAUTHORIZED",
    403: "FORBIDDEN",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    500: "INTERNAL_ERROR",
}


def _error_code(status_code: int) -> str:
    return _ERROR_CODE_BY_STATUS.get(int(status_code), "HTTP_ERROR")


@app.exception_handler(AppError)
def app_error_handler(request: Request, exc: AppError):  # noqa: ARG001
    payload: dict = {"error": exc.code, "message": exc.message}
    if isinstance(exc, ValidationError) and exc.errors:
        payload["errors"] = [e.to_dict() for e in exc.errors]
    if exc.details:
        payload["details"] = exc.details

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    if exc.status_code >= 500:
        logger.error("Server error on %s %s: %s", request.method, request.url.path, exc.message)
        if settings.is_prod:
            payload = {"error": exc.code, "message": "Internal server error"}

    return JSONResponse(status_code=exc.status_code, content=payload, headers=headers)


@app.exception_handler(StarletteHTTPException)
def http_exception_handler(request: Request, exc: StarletteHTTPException):  # noqa: ARG001
    detail = exc.detail
    message = detail if isinstance(detail, str) and detail else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": _error_code(exc.status_code), "message": message},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):  # noqa: ARG001
    errors = []
    for err in exc.errors():
        loc = [str(p) for p in (err.get("loc") or ()) if p not in ("body", "query", "path")]
        errors.append({"field": ".".join(loc) or "body", "reason": err.get("msg") or "invalid"})
    return JSONResponse(
        status_code=400,
        content={
            "error": "VALIDATION_ERROR",
            "message": "Invalid request payload",
            "errors": errors,
        },
    )


@app.exception_handler(Exception)
def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = "Internal server error" if settings.is_prod else f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content={"error": "INTERNAL_ERROR", "message": message})


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(passports_router)

@app.get("/health")
def health_check():
    return {"status": "ok"}
