"""
Search box helpers: manufacturer correction and model/trim suggestions.

Both are advisory. A failure here must never block the towing lookup, so
errors degrade to the original input or an empty list instead of raising.
"""

import logging
from typing import List

from config import settings
from llm_interface import GenerativeBackend
from prompts import build_make_correction_request, build_options_request
from response_parser import parse_corrected_make, parse_vehicle_options
from utils import MAKE_ALIASES, dedupe_options

logger = logging.getLogger(__name__)

MIN_MAKE_LENGTH_FOR_CORRECTION = 2
MIN_MAKE_LENGTH_FOR_MODELS = 3
MIN_MODEL_LENGTH_FOR_TRIMS = 3


def correct_make(backend: GenerativeBackend, make: str) -> str:
    """Canonical manufacturer name for make ("Chevy" -> "Chevrolet"), or make unchanged."""
    if make is None:
        return make
    trimmed = make.strip()
    alias = MAKE_ALIASES.get(trimmed.lower())
    if alias:
        return alias
    if len(trimmed) < MIN_MAKE_LENGTH_FOR_CORRECTION:
        return make

    request = build_make_correction_request(trimmed)
    try:
        raw = backend.generate(request.prompt, schema=request.response_schema, temperature=request.temperature)
        corrected = parse_corrected_make(raw)
    except Exception as e:
        logger.warning("[MAKE] Error correcting make for query '%s': %s", make, e)
        return make
    if corrected != trimmed:
        logger.debug("[MAKE] Corrected '%s' to '%s'", trimmed, corrected)
    return corrected


def list_vehicle_options(backend: GenerativeBackend, query: str, limit: int = None) -> List[str]:
    """Ordered, de-duplicated option names for a query like "models for 2021 Subaru"."""
    limit = limit or settings.SUGGESTION_LIMIT
    try:
        request = build_options_request(query, limit)
        raw = backend.generate(request.prompt, schema=request.response_schema, temperature=request.temperature)
        options = parse_vehicle_options(raw)
    except Exception as e:
        logger.warning("[OPTIONS] Error fetching vehicle options for query '%s': %s", query, e)
        return []
    return dedupe_options(options, limit)


def _join(*parts) -> str:
    return " ".join(str(p).strip() for p in parts if p is not None and str(p).strip())


def fetch_models(backend: GenerativeBackend, year, make: str, limit: int = None) -> List[str]:
    if not make or len(make.strip()) < MIN_MAKE_LENGTH_FOR_MODELS:
        return []
    return list_vehicle_options(backend, "models for " + _join(year, make), limit)


def fetch_trims(backend: GenerativeBackend, year, make: str, model: str, limit: int = None) -> List[str]:
    if not make or not make.strip() or not model or len(model.strip()) < MIN_MODEL_LENGTH_FOR_TRIMS:
        return []
    return list_vehicle_options(backend, "trims for " + _join(year, make, model), limit)
