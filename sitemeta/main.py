import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sitemeta.config import get_settings
from sitemeta.routes import metadata
from sitemeta.services.metadata_fetcher import WebsiteParser

settings = get_settings()

# Setup logging
logging.basicConfig(
    level=settings.log_level.upper(),
    filename=settings.log_file or None,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name)
app.state.resolver = WebsiteParser(settings=settings)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(metadata.router)


@app.get("/")
async def read_root():
    return {"message": "Welcome to the Site Metadata API!"}


# Log requests and responses
@app.middleware("http")
async def log_requests(request, call_next):
    logger.info(f"Request: {request.method} {request.url}")
    response = await call_next(request)
    logger.info(f"Response: {response.status_code}")
    return response
