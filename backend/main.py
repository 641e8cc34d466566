"""
GeoTagCheck API - FastAPI backend for tag quality checks on geodata.

Run with: uvicorn main:app --reload
"""

import io
import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

import pandas as pd
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from tagcheck import (
    ConfigError,
    FeatureClass,
    FeatureContractError,
    ListSink,
    RuleConfig,
    TableSink,
    ValidationEngine,
    create_default_registry,
    features_from_frame,
    features_from_geojson,
    list_places,
    places_frame,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    logger.info("GeoTagCheck API starting with categories: %s", ", ".join(registry.get_categories()))
    yield
    logger.info("GeoTagCheck API shutting down")


# Initialize FastAPI app
app = FastAPI(
    title="GeoTagCheck API",
    description="Tag quality checks for points, lines and areas",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to your domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize validation engine
registry = create_default_registry()
engine = ValidationEngine(registry)


# Pydantic models for API
class CheckRequest(BaseModel):
    type: str = "FeatureCollection"
    features: List[Dict[str, Any]] = []
    options: Dict[str, Any] = {}


class CheckResponse(BaseModel):
    summary: Dict[str, Any]
    defects: List[Dict[str, Any]]
    defects_by_category: Dict[str, int]

class PlacesResponse(BaseModel):
    place_count: int
    places: List[Dict[str, Any]]



def engine_for(options: Optional[Dict[str, Any]]) -> ValidationEngine:
    """Return the shared engine, or a dedicated one if options override the config."""
    if not options:
        return engine
    try:
        config = RuleConfig.from_options(options)
    except ConfigError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return ValidationEngine(create_default_registry(config), config)


def contract_error(e: FeatureContractError) -> HTTPException:
    return HTTPException(status_code=422, detail=e.to_dict())


# ============================================================================
# API Endpoints
# ============================================================================

@app.get("/")
async def root():
    """Health check endpoint."""
    return {"status": "ok", "service": "GeoTagCheck API", "version": "1.0.0"}


@app.get("/api/rules")
async def get_rules():
    """Get documentation for all rule sets."""
    return {"rule_sets": registry.get_documentation()}


@app.get("/api/rules/{feature_class}")
async def get_rules_by_feature_class(feature_class: str):
    """Get the rule set of one feature class."""
    try:
        fc = FeatureClass(feature_class)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid feature class: {feature_class}")
    rule_set = registry.get_rule_set(fc)
    if rule_set is None:
        raise HTTPException(status_code=404, detail=f"No rules for feature class: {feature_class}")
    return rule_set.to_dict()


@app.post("/api/check", response_model=CheckResponse)
async def check_features(request: CheckRequest):
    """
    Check a GeoJSON FeatureCollection.

    Returns all defects in the order they were found.
    """
    checker = engine_for(request.options)
    sink = ListSink()
    try:
        summary = checker.run(features_from_geojson(request.model_dump()), sink)
    except FeatureContractError as e:
        raise contract_error(e)

    return CheckResponse(
        summary=summary.to_dict(),
        defects=[d.to_dict() for d in sink],
        defects_by_category=sink.get_counts_by_category(),
    )


@app.post("/api/check/report")
async def download_report(request: CheckRequest):
    """
    Check a GeoJSON FeatureCollection and download the defects as Excel,
    one sheet per category, followed by a sheet listing all places.
    """
    checker = engine_for(request.options)
    sink = TableSink.from_registry(checker.registry, checker.config.max_field_length)
    try:
        features = list(features_from_geojson(request.model_dump()))
    except FeatureContractError as e:
        raise contract_error(e)
    checker.run(features, sink)
    places = places_frame(list_places(features, checker.config))

    output = io.BytesIO()
    sink.write_excel(output, extra_frames={"places": places})
    output.seek(0)

    return StreamingResponse(
        output,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={
            "Content-Disposition": "attachment; filename=tagcheck_defects.xlsx"
        }
    )


@app.post("/api/places", response_model=PlacesResponse)
async def get_places(request: CheckRequest):
    """List every place of a GeoJSON FeatureCollection with its capital flag."""
    checker = engine_for(request.options)
    try:
        places = [p.to_dict() for p in list_places(features_from_geojson(request.model_dump()), checker.config)]
    except FeatureContractError as e:
        raise contract_error(e)
    return PlacesResponse(place_count=len(places), places=places)


@app.post("/api/upload", response_model=CheckResponse)
async def upload_file(file: UploadFile = File(...)):
    """
    Upload an Excel file with one feature per row and check it.

    Expected columns: id, kind (point/line/area), optional geometry;
    every other column is a tag.
    """
    if not file.filename or not file.filename.endswith(('.xlsx', '.xls')):
        raise HTTPException(
            status_code=400,
            detail="Invalid file format. Please upload an Excel file (.xlsx or .xls)"
        )

    contents = await file.read()
    try:
        df = pd.read_excel(io.BytesIO(contents))
    except Exception as e:
        raise HTTPException(status_code=400, detail=f"Error reading file: {str(e)}")

    if len(df) == 0:
        raise HTTPException(status_code=400, detail="File is empty")

    sink = ListSink()
    try:
        summary = engine.run(features_from_frame(df), sink)
    except FeatureContractError as e:
        raise contract_error(e)

    logger.info("Checked upload %s: %d defects", file.filename, summary.defect_count)
    return CheckResponse(
        summary=summary.to_dict(),
        defects=[d.to_dict() for d in sink],
        defects_by_category=sink.get_counts_by_category(),
    )


# ============================================================================
# Run server (development)
# ============================================================================

if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO)
    uvicorn.run(app, host="0.0.0.0", port=8000)
