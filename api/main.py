import os
import time

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from core.config import settings
from utils.logger import logger

# Import routers
from controller.health import health_controller as health
from controller.catalog import controller as catalog
from controller.image_generation import controller as image_generation

app = FastAPI(
    title="AS Colour Curation API",
    version="1.0.0",
    description="Proxy for the AS Colour catalog and the composite image generator"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Add logging middleware to debug requests/responses
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    process_time = time.time() - start_time
    logger.info(
        f"{request.method} {request.url.path} {response.status_code} - {process_time * 1000:.1f} ms"
    )

    return response


app.include_router(
    health.router,
    tags=["System"]
)

app.include_router(
    catalog.router,
    prefix="/api",
    tags=["AS Colour - Catalog"]
)

app.include_router(
    image_generation.router,
    prefix="/api",
    tags=["Image Generation"]
)


def mount_client(application: FastAPI, dist_path: str) -> bool:
    """
    Serve the built client with an index.html fallback for client-side routes.

    Returns:
        True if the dist directory exists and was mounted
    """
    if not dist_path or not os.path.isdir(dist_path):
        return False

    index_file = os.path.join(dist_path, "index.html")
    assets_dir = os.path.join(dist_path, "assets")
    if os.path.isdir(assets_dir):
        application.mount("/assets", StaticFiles(directory=assets_dir), name="assets")

    @application.get("/{full_path:path}", include_in_schema=False)
    async def serve_client(full_path: str):
        candidate = os.path.realpath(os.path.join(dist_path, full_path))
        if full_path and candidate.startswith(os.path.realpath(dist_path)) and os.path.isfile(candidate):
            return FileResponse(candidate)
        return FileResponse(index_file)

    logger.info(f"Serving client from {dist_path}")
    return True


mount_client(
    app,
    settings.CLIENT_DIST_PATH or os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "client", "dist")
)


if __name__ == "__main__":
    settings.validate_required()
    logger.info(f"API server listening on http://localhost:{settings.PORT}")
    uvicorn.run("main:app", host="0.0.0.0", port=settings.PORT)
