import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

import config
from backend_client import BackendClient
from dataBase import get_backend
from errors import BackendError
from logging_config import configure_logging
from routes import (
    auth_routes,
    contact_exchange_routes,
    donation_routes,
    navigation_routes,
    notification_routes,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    logger.info("BookBridge API starting (database %s)", config.DATABASE_NAME)
    yield
    logger.info("BookBridge API shutting down")


app = FastAPI(title="BookBridge API", version="1.0.0", lifespan=lifespan)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_routes)
app.include_router(contact_exchange_routes)
app.include_router(donation_routes)
app.include_router(navigation_routes)
app.include_router(notification_routes)


@app.get("/")
def root():
    return RedirectResponse(url="/docs")


@app.get("/health")
async def health(backend: BackendClient = Depends(get_backend)):
    try:
        await backend.ping()
    except BackendError as e:
        raise HTTPException(status_code=503, detail=str(e))
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host=config.HOST, port=config.PORT)
