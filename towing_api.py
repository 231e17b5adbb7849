import logging
from functools import lru_cache
from typing import List, Optional, Union

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from config import settings
from errors import (
    BackendUnavailable,
    ExtractionNotFound,
    InvalidQuery,
    MalformedResponse,
    UnrecognizedVehicle,
)
from llm_interface import GenerativeBackend, LangChainBackend
from models import SearchParams, TowingInfo
from plate_decoder import PlateDecoder
from towing_service import TowingService
from utils import COMMON_MAKES, DRIVETRAIN_GUIDE, decode_image_payload
from vehicle_query import correct_make, fetch_models, fetch_trims

logger = logging.getLogger(__name__)

RETRY_MESSAGE = "Failed to get towing information from the AI model. Please try again."

app = FastAPI(
    title="Towing Guide",
    version="0.1.0",
    description="Wheel-lift towing procedures for any vehicle, by text, VIN or photo.",
)


@app.on_event("startup")
async def startup_event():
    """Configure logging once the server starts, not on import."""
    logging.basicConfig(
        level=settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Allow CORS for all origins (for development)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Dependencies ---

@lru_cache
def get_backend() -> GenerativeBackend:
    return LangChainBackend()


@lru_cache
def get_plate_decoder() -> PlateDecoder:
    return PlateDecoder()


def get_towing_service(
    backend: GenerativeBackend = Depends(get_backend),
    plate_decoder: PlateDecoder = Depends(get_plate_decoder),
) -> TowingService:
    return TowingService(backend, plate_decoder)


# --- Error mapping ---

@app.exception_handler(InvalidQuery)
async def invalid_query_handler(request: Request, exc: InvalidQuery):
    return JSONResponse(status_code=400, content={"error": "invalid_query", "detail": str(exc)})


@app.exception_handler(UnrecognizedVehicle)
async def unrecognized_vehicle_handler(request: Request, exc: UnrecognizedVehicle):
    return JSONResponse(status_code=404, content={"error": "unrecognized_vehicle", "detail": str(exc)})


@app.exception_handler(ExtractionNotFound)
async def extraction_not_found_handler(request: Request, exc: ExtractionNotFound):
    return JSONResponse(
        status_code=422,
        content={"error": "extraction_not_found", "kind": exc.kind, "detail": str(exc)},
    )


@app.exception_handler(MalformedResponse)
async def malformed_response_handler(request: Request, exc: MalformedResponse):
    logger.error("[API] Malformed AI response on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=502, content={"error": "malformed_response", "detail": RETRY_MESSAGE})


@app.exception_handler(BackendUnavailable)
async def backend_unavailable_handler(request: Request, exc: BackendUnavailable):
    logger.error("[API] Backend unavailable on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=503, content={"error": "backend_unavailable", "detail": RETRY_MESSAGE})


# --- Request bodies ---

class QueryRequest(BaseModel):
    query: str


class ModelsRequest(BaseModel):
    year: Optional[Union[int, str]] = None
    make: str


class TrimsRequest(BaseModel):
    year: Optional[Union[int, str]] = None
    make: str
    model: str


class MakeRequest(BaseModel):
    make: str


class ImageRequest(BaseModel):
    image: str  # base64, optionally as a data URL


def _image_bytes(request: ImageRequest) -> bytes:
    try:
        return decode_image_payload(request.image)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# --- Routes ---

@app.get("/health", tags=["health"])
def health_check():
    return {"status": "ok"}


@app.post("/api/towing", response_model=TowingInfo)
def towing_lookup(request: QueryRequest, service: TowingService = Depends(get_towing_service)):
    return service.get_towing_info(request.query)


@app.post("/api/towing/search", response_model=TowingInfo)
def towing_search(params: SearchParams, service: TowingService = Depends(get_towing_service)):
    return service.search(params)


@app.post("/api/options/models")
def model_options(request: ModelsRequest, backend: GenerativeBackend = Depends(get_backend)):
    return {"options": fetch_models(backend, request.year, request.make)}


@app.post("/api/options/trims")
def trim_options(request: TrimsRequest, backend: GenerativeBackend = Depends(get_backend)):
    return {"options": fetch_trims(backend, request.year, request.make, request.model)}


@app.post("/api/makes/correct")
def make_correction(request: MakeRequest, backend: GenerativeBackend = Depends(get_backend)):
    return {"correctedMake": correct_make(backend, request.make)}


@app.get("/api/makes")
def common_makes() -> List[str]:
    return COMMON_MAKES


@app.get("/api/drivetrains")
def drivetrain_guide():
    return DRIVETRAIN_GUIDE


@app.post("/api/images/vin")
def image_vin(request: ImageRequest, service: TowingService = Depends(get_towing_service)):
    return {"vin": service.read_vin(_image_bytes(request))}


@app.post("/api/images/identify")
def image_identify(request: ImageRequest, service: TowingService = Depends(get_towing_service)):
    query, info = service.identify_and_search(_image_bytes(request))
    return {"query": query, "towingInfo": info}


@app.post("/api/images/scan")
def image_scan(request: ImageRequest, service: TowingService = Depends(get_towing_service)):
    result = service.scan_code(_image_bytes(request))
    return {
        "codeType": result.code_type,
        "vin": result.vin,
        "query": result.query,
        "towingInfo": result.towing_info,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("towing_api:app", host="0.0.0.0", port=8000, reload=settings.LOG_LEVEL == "DEBUG")
