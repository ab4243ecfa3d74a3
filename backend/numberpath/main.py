from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from numberpath.api import practice
from numberpath.core.config import get_settings

settings = get_settings()

app = FastAPI(
    title=settings.app_name,
    description="Adaptive arithmetic practice: competency scheduling, task generation and error diagnosis",
    version="0.1.0",
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        settings.frontend_url,
        "http://localhost:5173",  # Vite dev server
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(practice.router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health")
async def health():
    return {"status": "ok"}
