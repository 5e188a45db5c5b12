import asyncio
import os

import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from logger import logger
from utils.exception_handler import (
    handle_validation_error,
    custom_http_exception_handler,
    request_validation_exception_handler,
)

from router import ApiRouter, DefaultRouter, StatusRouter

from database.db import init_models  # sync DB init

app = FastAPI(title="Kurasyit")

# Routers
app.include_router(ApiRouter)
app.include_router(StatusRouter)
app.include_router(DefaultRouter)

# Exception handlers
app.add_exception_handler(ValidationError, handle_validation_error)
app.add_exception_handler(HTTPException, custom_http_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)

# CORS
CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# -------------------------------
# Startup event
# -------------------------------
@app.on_event("startup")
async def startup_event():
    loop = asyncio.get_running_loop()
    # Initialize DB safely in executor
    await loop.run_in_executor(None, init_models)
    logger.info(msg="Kurasyit service started")


if __name__ == "__main__":
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
