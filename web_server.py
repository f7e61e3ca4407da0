#!/usr/bin/env python3
"""
FastAPI application - read-only JSON API for the Fedora image test dashboard.
"""

import logging
from datetime import datetime

from fastapi import FastAPI, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import core
from fedora_testresults.config import get_port

logger = logging.getLogger(__name__)

COMPOSES_CACHE_CONTROL = "public, max-age=300"

app = FastAPI(
    title="Fedora Test Analyzer",
    description="Aggregated Fedora cloud image test results",
    version="0.1.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _error_details(e: Exception) -> str:
    return str(e) or e.__class__.__name__


@app.get("/api/composes.json")
def list_composes():
    """
    List available compose IDs, newest first.
    """
    try:
        payload = core.get_composes()
    except Exception as e:
        logger.error(f"Error fetching composes: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": "Failed to fetch compose IDs"},
        )
    return JSONResponse(content=payload, headers={"Cache-Control": COMPOSES_CACHE_CONTROL})


@app.get("/api/fedora-data")
def fedora_data():
    """
    Latest results and weekly series for every Fedora version.
    """
    try:
        return JSONResponse(content=core.get_fedora_data())
    except Exception as e:
        logger.error(f"Error collecting Fedora data: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch data", "details": _error_details(e)},
        )


@app.get("/api/main")
def main_data(distro: str = Query("fedora"), format: str = Query("grouped")):
    """
    Results for a distribution, grouped with a summary or as a flat list.
    """
    try:
        data = core.get_distro_data(distro, fmt=format)
    except Exception as e:
        logger.error(f"Error collecting data for {distro}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch data", "details": _error_details(e)},
        )

    if data is None:
        return JSONResponse(
            status_code=404,
            content={"error": "Distro not found", "availableDistros": core.available_distros()},
        )
    return JSONResponse(content=data)


@app.get("/api/results/{compose_id}.json")
def compose_results(compose_id: str):
    """
    Parsed results of every architecture of one compose.
    """
    try:
        report = core.get_compose_report(compose_id)
    except Exception as e:
        logger.error(f"Error fetching results for {compose_id}: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Failed to fetch results", "details": _error_details(e)},
        )

    if report is None:
        return JSONResponse(status_code=404, content={"error": f"No results for {compose_id}"})
    return JSONResponse(content=report)


@app.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


def run(port: int = None):
    import uvicorn

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s'
    )
    uvicorn.run(app, host="0.0.0.0", port=port or get_port('API_PORT', 8000))


if __name__ == "__main__":
    run()
