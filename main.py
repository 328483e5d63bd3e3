from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from dotenv import load_dotenv

from app.core.config import settings
from app.api.v1.router import api_router
from app.services.logger import logger

# Load environment variables
load_dotenv()

API_VERSION = "1.0.0"

# Create FastAPI app
app = FastAPI(
    title="GymBro API",
    description="Workout logging, challenges and volume leaderboards",
    version=API_VERSION,
    docs_url="/docs" if settings.ENVIRONMENT == "development" else None,
    redoc_url="/redoc" if settings.ENVIRONMENT == "development" else None,
    redirect_slashes=False,  # Disable automatic redirects to preserve Authorization header
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API router
app.include_router(api_router, prefix="/api/v1")


# Health check endpoint
@app.get("/health")
async def health_check():
    return {"status": "ok", "version": app.version}


@app.on_event("startup")
async def startup_event():
    logger.info(f"GymBro API {API_VERSION} started ({settings.ENVIRONMENT})")


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.ENVIRONMENT == "development",
    )
