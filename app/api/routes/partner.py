"""
Partner API documentation and status
"""
from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

router = APIRouter()


def api_documentation(base_url: str) -> dict:
    return {
        "name": "ProductDescriptions.io API",
        "version": "v1",
        "documentation": "https://productdescriptions.io/docs/api",
        "endpoints": {
            "documentation": {
                "method": "GET",
                "url": f"{base_url}/api/v1",
                "description": "This document",
            },
            "status": {
                "method": "GET",
                "url": f"{base_url}/api/v1/status",
                "description": "Check API status",
            },
        },
        "errors": {
            "400": "Invalid request data",
            "500": "Internal server error",
        },
        "support": {
            "email": "api@productdescriptions.io",
            "documentation": "https://productdescriptions.io/docs/api",
            "status_page": "https://status.productdescriptions.io",
        },
    }


@router.get("")
async def documentation(request: Request) -> dict:
    host = request.headers.get("host") or request.url.netloc
    return api_documentation(f"https://{host}")


@router.get("/status")
async def api_status() -> dict:
    return {
        "status": "operational",
        "message": "API is running",
        "version": "v1",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "endpoints": {
            "documentation": "/api/v1",
            "status": "/api/v1/status",
        },
    }
