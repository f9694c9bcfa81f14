from fastapi import APIRouter
from fastapi.responses import PlainTextResponse

router = APIRouter()


@router.get("/", response_class=PlainTextResponse)
async def root():
    """Root endpoint"""
    return "Hello World from AsColour API Server Backend"


@router.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "message": "AS Colour curation API is running"}
