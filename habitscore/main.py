import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load env from habitscore/.env
package_dir = os.path.dirname(os.path.abspath(__file__))
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv(dotenv_path=os.path.join(package_dir, ".env"))

from habitscore.core.config import settings, validate_config, cors_origins
from habitscore.core.logging import configure_logging
from habitscore.core.middleware.request_id import RequestIdMiddleware
from habitscore.core.validation import validate_env
from habitscore.core.database import create_all_tables
from habitscore.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    request_validation_handler,
    unhandled_exception_handler,
)
from habitscore.api import health, habits, scores, leaderboard, users

configure_logging(settings.ENV)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("habitscore")
    logger.info("Starting habitscore...")
    create_all_tables()
    try:
        yield
    finally:
        logging.getLogger("habitscore").info("Stopping habitscore...")


app = FastAPI(title="habitscore - Scoring & Analytics", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# CORS (adjust origins in production)
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.root_router, tags=["health"])
app.include_router(habits.router, tags=["habits"])
app.include_router(scores.router, tags=["scores"])
app.include_router(leaderboard.router, tags=["leaderboard"])
app.include_router(users.router, tags=["users"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("habitscore.main:app", host="0.0.0.0", port=8000, reload=settings.ENV == "development")
