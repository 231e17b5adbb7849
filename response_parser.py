"""
Turns raw model output into typed records.

The backend is asked for schema-constrained JSON but is not trusted to return
only that: answers may be wrapped in markdown fences or commentary. The parser
slices the outermost JSON object, validates its structure against the pydantic
records and then checks that the answer actually describes a vehicle.
"""

import json
import logging
from typing import List

from pydantic import ValidationError

from errors import MalformedResponse, UnrecognizedVehicle
from models import (
    CodeType,
    IdentificationFailed,
    TowingInfo,
    VehicleIdentificationResult,
    VehicleIdentified,
)
from schemas import CODE_TYPES
from utils import is_effectively_none_or_absent

logger = logging.getLogger(__name__)


def extract_json_object(raw_text: str) -> dict:
    """Return the object spanning the first '{' to the last '}' of raw_text."""
    text = (raw_text or "").strip()
    start = text.find("{")
    end = text.rfind("}")
    if start == -1 or end == -1 or end < start:
        logger.debug("[PARSE] No JSON object found in response: %r", raw_text)
        raise MalformedResponse("Could not find a JSON object in the AI response.", raw_text)

    try:
        data = json.loads(text[start:end + 1])
    except json.JSONDecodeError as e:
        logger.debug("[PARSE] Failed to decode extracted JSON (%s): %r", e, raw_text)
        raise MalformedResponse(f"AI response contained invalid JSON: {e}", raw_text) from e

    if not isinstance(data, dict):
        raise MalformedResponse("AI response JSON is not an object.", raw_text)
    return data


def parse_towing_info(raw_text: str) -> TowingInfo:
    data = extract_json_object(raw_text)

    vehicle = data.get("vehicle")
    if not isinstance(vehicle, dict):
        # Quota bodies, options objects and other foreign shapes land here
        logger.debug("[PARSE] Response has no vehicle object: %r", raw_text)
        raise MalformedResponse("AI response does not contain a vehicle object.", raw_text)

    # Checked before the full schema so a "don't know this vehicle" answer with
    # other fields left out still reads as unrecognized rather than malformed.
    if is_effectively_none_or_absent(vehicle.get("make")) \
            or is_effectively_none_or_absent(vehicle.get("model")):
        logger.info("[PARSE] Response did not identify a vehicle: %r", vehicle)
        raise UnrecognizedVehicle("The AI model could not recognize this vehicle. Check the year, make and model.")

    try:
        return TowingInfo.model_validate(data)
    except ValidationError as e:
        logger.debug("[PARSE] Towing info failed validation: %s", e)
        raise MalformedResponse(f"AI response does not match the towing info schema: {e}", raw_text) from e


def parse_vehicle_options(raw_text: str) -> List[str]:
    data = extract_json_object(raw_text)
    options = data.get("options")
    if not isinstance(options, list) or not all(isinstance(o, str) for o in options):
        raise MalformedResponse("'options' must be a list of strings.", raw_text)
    return options


def parse_corrected_make(raw_text: str) -> str:
    data = extract_json_object(raw_text)
    corrected = data.get("correctedMake")
    if not isinstance(corrected, str) or is_effectively_none_or_absent(corrected):
        raise MalformedResponse("'correctedMake' is missing or empty.", raw_text)
    return corrected.strip()


def parse_vehicle_identification(raw_text: str) -> VehicleIdentificationResult:
    data = extract_json_object(raw_text)
    make, model, error = data.get("make"), data.get("model"), data.get("error")
    has_vehicle = isinstance(make, str) and isinstance(model, str) \
        and not is_effectively_none_or_absent(make) and not is_effectively_none_or_absent(model)
    has_error = isinstance(error, str) and not is_effectively_none_or_absent(error)

    if has_vehicle and has_error:
        raise MalformedResponse("Identification returned both a vehicle and an error.", raw_text)
    if has_error:
        return IdentificationFailed(error=error.strip())
    if not has_vehicle:
        # A make without a model (or the reverse) is not something the caller can search on
        raise MalformedResponse("Identification must include both make and model, or an error.", raw_text)

    year = data.get("year")
    if is_effectively_none_or_absent(year) or year == 0:
        year = None
    try:
        return VehicleIdentified(make=make.strip(), model=model.strip(), year=year)
    except ValidationError as e:
        raise MalformedResponse(f"Identification has an invalid year: {year!r}", raw_text) from e


def parse_code_type(raw_text: str) -> CodeType:
    data = extract_json_object(raw_text)
    code_type = data.get("codeType")
    if code_type not in CODE_TYPES:
        raise MalformedResponse(f"Unknown code type: {code_type!r}", raw_text)
    return code_type
