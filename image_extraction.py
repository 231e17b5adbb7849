import logging
import re
from typing import Optional

from llm_interface import GenerativeBackend
from models import CodeType, VehicleIdentificationResult
from prompts import (
    build_code_classification_request,
    build_vehicle_identification_request,
    build_vin_extraction_request,
)
from response_parser import parse_code_type, parse_vehicle_identification

logger = logging.getLogger(__name__)

VIN_LENGTH = 17
VIN_VALID_CHARS = frozenset("0123456789ABCDEFGHJKLMNPRSTUVWXYZ")  # no I, O or Q
VIN_TOKEN_PATTERN = re.compile(r"(?<![A-Z0-9])[A-HJ-NPR-Z0-9]{17}(?![A-Z0-9])")


def filter_vin_chars(text: str) -> str:
    """Uppercase text and drop every character outside the VIN alphabet."""
    return "".join(c for c in (text or "").upper() if c in VIN_VALID_CHARS)


def is_valid_vin(vin: str) -> bool:
    return vin is not None and len(vin) == VIN_LENGTH and all(c in VIN_VALID_CHARS for c in vin)


def _is_vin_segment(token: str) -> bool:
    """A whitespace token that can be part of a spaced-out VIN ("1HG", "33A0-04352")."""
    chars = token.replace("-", "")
    if not chars or not all(c in VIN_VALID_CHARS for c in chars.upper()):
        return False
    # Letter-only tokens must already be uppercase, otherwise they read as prose ("The", "sorry")
    return any(c.isdigit() for c in chars) or chars == chars.upper()


def normalize_vin(raw_text: str) -> Optional[str]:
    """
    Pull a VIN out of raw model text.

    A standalone 17-character token wins ("VIN: 1HGCM82633A004352 (driver door)").
    Otherwise runs of adjacent VIN-like tokens are joined ("1HG CM826 33A0-04352")
    and the first run holding a digit and at least 17 characters is cut to 17.
    Prose never contributes characters, so a refusal or a short misread is None.
    """
    upper = (raw_text or "").upper()
    match = VIN_TOKEN_PATTERN.search(upper)
    if match:
        return match.group(0)

    run = []
    for token in (raw_text or "").split() + [""]:
        token = token.strip(".,;:!?()[]\"'")
        if token and _is_vin_segment(token):
            run.append(token)
            continue
        candidate = filter_vin_chars("".join(run))
        if len(candidate) >= VIN_LENGTH and any(c.isdigit() for c in candidate):
            return candidate[:VIN_LENGTH]
        run = []
    return None


def extract_vin(backend: GenerativeBackend, image: bytes) -> Optional[str]:
    """VIN read from an image, or None when none can be read."""
    request = build_vin_extraction_request()
    raw = backend.generate(request.prompt, schema=request.response_schema, image=image, temperature=request.temperature)
    if "NOT_FOUND" in (raw or "").upper():
        logger.info("[VIN] Model reported no VIN in image")
        return None
    vin = normalize_vin(raw)
    if vin is None:
        logger.info("[VIN] Could not extract a valid VIN from model output: %r", raw)
    return vin


def identify_vehicle(backend: GenerativeBackend, image: bytes) -> VehicleIdentificationResult:
    request = build_vehicle_identification_request()
    raw = backend.generate(request.prompt, schema=request.response_schema, image=image, temperature=request.temperature)
    return parse_vehicle_identification(raw)


def classify_code_type(backend: GenerativeBackend, image: bytes) -> CodeType:
    """Whether an image shows a VIN, a license plate, or neither."""
    request = build_code_classification_request()
    raw = backend.generate(request.prompt, schema=request.response_schema, image=image, temperature=request.temperature)
    return parse_code_type(raw)
