from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from family_tree.core.config import settings
from family_tree.core.errors import NotFoundError, StoreError, ValidationError
from family_tree.core.logging import configure_logging
from family_tree.routers import family, health

configure_logging(settings.log_level)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.seed_demo_data:
        from family_tree.core.db import SessionLocal
        from family_tree.services.seed import seed_demo_family

        with SessionLocal() as db:
            seed_demo_family(db)
    yield


app = FastAPI(
    title="Family Tree API",
    version="1.0.0",
    description="Family member records with parent/child links and sibling ordering.",
    root_path=settings.root_path,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _error_field(loc: tuple) -> str | None:
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    return ".".join(parts) or None


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {"msg": "Invalid request", "loc": ()}
    body = {"message": first["msg"]}
    field = _error_field(tuple(first.get("loc", ())))
    if field:
        body["field"] = field
    logger.warning("{method} {path} rejected: {body}", method=request.method, path=request.url.path, body=body)
    return JSONResponse(status_code=400, content=body)


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    body = {"message": exc.message}
    if exc.field:
        body["field"] = exc.field
    logger.warning("{method} {path} rejected: {body}", method=request.method, path=request.url.path, body=body)
    return JSONResponse(status_code=400, content=body)


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    logger.warning("{method} {path}: {message}", method=request.method, path=request.url.path, message=exc.message)
    return JSONResponse(status_code=404, content={"message": exc.message})


@app.exception_handler(StoreError)
async def store_error_handler(request: Request, exc: StoreError):
    logger.error("{method} {path}: {message}", method=request.method, path=request.url.path, message=exc.message)
    return JSONResponse(status_code=500, content={"message": exc.message})


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("{method} {path}: database error", method=request.method, path=request.url.path)
    return JSONResponse(status_code=500, content={"message": "Database error"})


app.include_router(health.router)
app.include_router(family.router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
