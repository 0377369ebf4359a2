# Run from project root: python -m app.main  (or: uvicorn app.main:app --port 3000)

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from app.api.routes import error_response, router
from app.core.config import (
    CORS_ORIGINS,
    LOG_LEVEL,
    PORT,
    USE_AGENT,
    require_openai_key,
    require_query_mode,
)

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Aborts startup (and the server process) on a missing key or unknown mode
    require_openai_key()
    mode = require_query_mode()
    logger.info("Llama server starting: mode=%s agent=%s port=%d", mode, USE_AGENT, PORT)
    yield
    logger.info("Llama server stopped")


app = FastAPI(title="Llama Server", lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.info("[api] invalid request body on %s: %s", request.url.path, exc.errors())
    return error_response(400, "Invalid request body")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=PORT)
