from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .api import health, paymaster, userops
from .config import settings
from .core.userop import MalformedInputError
from .logging_config import setup_logging
from .middleware import RequestLoggingMiddleware

setup_logging()

# Create FastAPI app
app = FastAPI(
    title="aNode Paymaster API",
    description="ERC-4337 UserOperation hashing, validation and sponsorship",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.exception_handler(MalformedInputError)
async def malformed_input_handler(request: Request, exc: MalformedInputError) -> JSONResponse:
    """Malformed input is the caller's fault; report the error kind and field"""
    return JSONResponse(status_code=400, content={"success": False, "error": exc.to_dict()})


# Include routers
app.include_router(health.router, tags=["Health"])
app.include_router(userops.router, tags=["UserOperations"])
app.include_router(paymaster.router, tags=["Paymaster"])


@app.get("/")
async def root():
    """Root endpoint with basic info"""
    return {
        "name": "aNode Paymaster API",
        "version": __version__,
        "description": "ERC-4337 UserOperation hashing, validation and sponsorship",
        "docs": "/docs",
        "health": "/health"
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "anode.main:app",
        host=settings.host,
        port=settings.port,
        reload=True,
        log_level=settings.log_level.lower()
    )
