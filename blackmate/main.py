import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from blackmate.api import download, generate, health
from blackmate.config.settings import config
from blackmate.core.errors import BlackMateError
from blackmate.core.logging import setup_logging
from blackmate.infra.runtime import close_runtime, init_runtime

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request.state.request_id = uuid.uuid4().hex[:12]
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response


@app.exception_handler(BlackMateError)
async def blackmate_error_handler(request: Request, exc: BlackMateError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    logger.debug(f"Rejected request body: {exc.errors()}")
    return JSONResponse(status_code=400, content={"error": "Invalid input"})


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )


# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(generate.router, tags=["Generate"])
app.include_router(download.router, tags=["Download"])


@app.on_event("startup")
async def startup_event():
    await init_runtime()


@app.on_event("shutdown")
async def shutdown_event():
    await close_runtime()
