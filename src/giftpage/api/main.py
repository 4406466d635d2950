import os
import logging
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from giftpage.api import routers
from giftpage.core.errors import GiftPageError
from giftpage.core.logging_config import configure_logging

configure_logging()
logger = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, Stripe-Signature",
}

app = FastAPI(
    root_path=os.getenv("API_ROOT_PATH", "")
)

# API Gateway passes requests straight through, so every response carries
# the CORS headers itself.
class CORSHeaderMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response

app.add_middleware(CORSHeaderMiddleware)

@app.exception_handler(GiftPageError)
async def gift_page_error_handler(request: Request, exc: GiftPageError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = sorted({".".join(str(p) for p in err["loc"][1:]) or "body" for err in exc.errors()})
    return JSONResponse(status_code=400, content={"error": f"Invalid or missing fields: {', '.join(fields)}"})

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"{request.method} {request.url.path} failed")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})

@app.options("/{full_path:path}")
async def options_handler(full_path: str):
    return Response(status_code=204, headers=CORS_HEADERS)

app.include_router(routers.router)

handler = Mangum(app)
