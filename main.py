"""
FastAPI application for the RUB figure service.
Main entry point with REST API endpoints.
"""

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError
from typing import Optional, Dict, Any, List
import pandas as pd
import uvicorn
import logging
import time
from datetime import datetime

from figure_catalog.exceptions import FigureError
from figure_catalog.models import DEFAULT_STYLE, PlotStyle
from figure_catalog.palettes import list_palettes
from visualization.generator import FigureDispatcher, list_figure_types
from config import APP_CONFIG, LOG_CONFIG, PLOT_CONFIG


# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_CONFIG["level"]),
    format=LOG_CONFIG["format"],
    handlers=[
        logging.FileHandler("figure_service.log"),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title=APP_CONFIG["name"],
    description="Corporate-design charts for tagged figure tables",
    version=APP_CONFIG["version"],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"] if APP_CONFIG["debug"] else ["http://localhost:3000", "http://localhost:8000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID", "X-Execution-Time"]
)


class RenderRequest(BaseModel):
    """Figure table plus rendering options."""
    rows: List[Dict[str, Any]] = Field(..., description="Figure table, one dict per row")
    include_image: bool = Field(False, description="Also return a base64 PNG")
    style: Optional[Dict[str, Any]] = Field(None, description="Overrides of the default plot style")


def build_style(overrides: Optional[Dict[str, Any]]) -> PlotStyle:
    """Default style with the request's overrides applied."""
    if not overrides:
        return DEFAULT_STYLE
    unknown = set(overrides) - set(PlotStyle.model_fields)
    if unknown:
        raise HTTPException(status_code=400, detail=f"Unknown style fields: {sorted(unknown)}")
    try:
        return PlotStyle(**{**DEFAULT_STYLE.model_dump(), **overrides})
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=f"Invalid style: {e.errors()[0]['msg']}")


# Middleware to add request ID and timing
@app.middleware("http")
async def add_process_time_header(request, call_next):
    start_time = time.time()
    response = await call_next(request)
    process_time = time.time() - start_time
    response.headers["X-Execution-Time"] = str(round(process_time * 1000, 2))
    response.headers["X-Request-ID"] = f"req_{int(start_time * 1000)}"
    return response


@app.get("/health")
async def health_check():
    """Health check with the active plot conventions."""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": APP_CONFIG["version"],
        "components": {
            "templates": {"status": "healthy", "count": len(list_figure_types())},
            "palettes": {"status": "healthy", "count": len(list_palettes())},
        },
        "style": {
            "base_family": PLOT_CONFIG["base_family"],
            "base_size": PLOT_CONFIG["base_size"],
            "caption_prefix": PLOT_CONFIG["caption_prefix"],
        }
    }


@app.get("/figure-types")
async def figure_types():
    """List the figure templates and the tags that select them."""
    return {"figure_types": list_figure_types()}


@app.post("/render")
def render_figure(request: RenderRequest):
    """
    Render a figure table.

    The figure_type_id column decides the template; the response holds the
    chart description and the plotly figure.
    """
    if len(request.rows) > APP_CONFIG["max_rows"]:
        raise HTTPException(
            status_code=413,
            detail=f"Table has {len(request.rows)} rows; at most {APP_CONFIG['max_rows']} are accepted"
        )

    style = build_style(request.style)
    table = pd.DataFrame(request.rows)
    logger.info(f"Render request: {len(table)} rows, columns {list(table.columns)}")

    dispatcher = FigureDispatcher(style=style)
    result = dispatcher.render_figure(table, include_image=request.include_image)

    return {
        "success": True,
        "figure_kind": result["figure_kind"],
        "description": result["description"],
        "figure": result["figure"],
        "advisories": result["description"]["advisories"],
    }


# Exception handlers
@app.exception_handler(FigureError)
async def figure_error_handler(request: Request, exc: FigureError):
    logger.warning(f"{type(exc).__name__}: {exc}")
    return JSONResponse(
        status_code=400,
        content={
            "success": False,
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.detail,
            "path": request.url.path,
            "method": request.method,
            "request_id": request.headers.get("X-Request-ID", "unknown")
        }
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)

    error_detail = str(exc) if APP_CONFIG["debug"] else "Internal server error"

    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": error_detail,
            "path": request.url.path,
            "method": request.method,
            "request_id": request.headers.get("X-Request-ID", "unknown")
        }
    )


@app.on_event("startup")
async def startup_event():
    """Log the active configuration on startup."""
    logger.info(f"Starting {APP_CONFIG['name']} v{APP_CONFIG['version']}")
    logger.info(
        f"Templates: {[t['figure_kind'] for t in list_figure_types()]}, "
        f"palettes: {len(list_palettes())}"
    )


# Main entry point
if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=APP_CONFIG["host"],
        port=APP_CONFIG["port"],
        reload=APP_CONFIG["debug"],
        log_level="debug" if APP_CONFIG["debug"] else "info",
        access_log=True
    )
