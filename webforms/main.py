from dotenv import load_dotenv
load_dotenv()

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.sessions import SessionMiddleware

from webforms.core.config import settings
from webforms.db.session import engine
from webforms.db.base import Base
from webforms.db import models  # noqa: F401 (ensures models are registered)
from webforms.api.router import api_router
from webforms.api.responses import SECURITY_HEADERS
from webforms.services.email import build_transport


#Configure logging once for the whole process
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


#Create application instance
app = FastAPI(title="Webforms API")


#Signed cookie session carrying per-client rate-limit timestamps
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SESSION_SECRET_KEY,
    same_site="lax",
)


#configure CORS for local development and production frontend domains
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


#Hardening headers on every response, not only form results
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    for name, value in SECURITY_HEADERS.items():
        response.headers.setdefault(name, value)
    return response


#Build the mail transport and (optionally) subscriber table on startup
@app.on_event("startup")
def startup():
    app.state.transport = build_transport(settings)
    logger.info("Mail transport: %s", settings.MAIL_TRANSPORT)

    if settings.NEWSLETTER_USE_DATABASE:
        Base.metadata.create_all(bind=engine)
        logger.info("Newsletter subscriber storage enabled")


@app.get("/health")
def health_check():
    return {
        "status": "ok",
        "mail_transport": settings.MAIL_TRANSPORT,
        "subscriber_storage": settings.NEWSLETTER_USE_DATABASE,
    }


#Register all API routes under the main application
app.include_router(api_router)
