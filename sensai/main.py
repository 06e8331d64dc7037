"""
SENSAI Career Coach
Main FastAPI application
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from sensai.config import get_settings
from sensai.utils.logger import log
from sensai import __version__

# Import routers
from sensai.api import health, user, dashboard, resume, interview, jobs
from sensai.middleware.auth_middleware import AuthMiddleware

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events"""
    # Startup
    log.info(f"Starting {settings.app_name} v{__version__}")
    log.info(f"Environment: {settings.environment}")

    # Initialize database
    try:
        from sensai.models.base import init_db
        init_db()
        log.info("Database initialized")
    except Exception as e:
        log.error(f"Database initialization error: {str(e)}")

    # Start the scheduler for the weekly insight refresh
    from sensai.scheduler import start_scheduler, stop_scheduler
    if settings.enable_scheduler:
        try:
            start_scheduler()
            log.info("Scheduler started successfully")
        except Exception as e:
            log.error(f"Scheduler startup error: {str(e)}")

    yield

    # Shutdown
    stop_scheduler()
    log.info("Shutting down application")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=__version__,
    description="""
    AI career coach

    - Industry insights: salary ranges, demand, skills and trends per industry,
      generated on demand and refreshed weekly
    - Resume editing with AI rewriting of individual entries
    - AI-generated technical interview quizzes with improvement tips
    """,
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Identity middleware (upstream auth proxy headers)
app.add_middleware(AuthMiddleware)

# Include routers
app.include_router(health.router, tags=["health"])
app.include_router(user.router)
app.include_router(dashboard.router)
app.include_router(resume.router)
app.include_router(interview.router)
app.include_router(jobs.router)


@app.get("/")
async def root():
    """Root endpoint with API information"""
    return {
        "app": settings.app_name,
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
        "status": "/status",
        "endpoints": {
            "me": "GET /user/me",
            "onboarding_status": "GET /user/onboarding-status",
            "update_profile": "PUT /user/profile",
            "industry_insights": "GET /dashboard/insights",
            "get_resume": "GET /resume",
            "save_resume": "PUT /resume",
            "improve_resume_entry": "POST /resume/improve",
            "generate_quiz": "POST /interview/quiz",
            "save_quiz_result": "POST /interview/results",
            "assessments": "GET /interview/assessments",
            "scheduled_jobs": "GET /jobs",
            "run_insight_refresh": "POST /jobs/insights/run"
        }
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "sensai.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
        workers=settings.api_workers if not settings.debug else 1
    )
