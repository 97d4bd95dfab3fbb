"""
Application factory and FastAPI app configuration.
"""

import logging
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from fairvalue_service.api.router import router as api_router
from fairvalue_service.config import get_settings

# Setup logger
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("fairvalue_service")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Fair Value API",
        version="0.1.0",
        description="Company fundamentals, YoY growth and multiple-based fair values",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.include_router(api_router)

    @application.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"Incoming request: {request.method} {request.url.path}")
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            logger.info(
                f"Request completed: {request.method} {request.url.path} "
                f"Status: {response.status_code} Time: {process_time:.4f}s"
            )
            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(f"Request failed: {request.method} {request.url.path} Error: {str(e)}")
            return JSONResponse(
                status_code=500,
                content={"detail": "Internal Server Error"},
            )

    @application.get("/")
    def read_root():
        return {"message": "Fair Value API is running"}

    return application


# Module-level app instance for uvicorn
app = create_app()


def main() -> None:
    settings = get_settings()
    logging.getLogger().setLevel(settings.LOG_LEVEL)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    main()
