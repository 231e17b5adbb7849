import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from errors import ExtractionNotFound, InvalidQuery
from image_extraction import classify_code_type, extract_vin, identify_vehicle, is_valid_vin
from llm_interface import GenerativeBackend
from models import CodeType, IdentificationFailed, SearchParams, TowingInfo
from plate_decoder import PlateDecoder
from prompts import build_towing_request
from response_parser import parse_towing_info
from utils import format_vin_query

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanResult:
    code_type: CodeType
    vin: str
    query: str
    towing_info: TowingInfo


class TowingService:
    """
    Entry point for every lookup a caller can make: free text, search form,
    VIN or plate scan, and vehicle photo. Holds no state beyond its clients.
    """

    def __init__(self, backend: GenerativeBackend, plate_decoder: Optional[PlateDecoder] = None):
        self.backend = backend
        self.plate_decoder = plate_decoder

    def get_towing_info(self, query: str) -> TowingInfo:
        request = build_towing_request(query)
        logger.info("[TOWING] Looking up towing info for '%s'", query.strip())
        raw = self.backend.generate(request.prompt, schema=request.response_schema, temperature=request.temperature)
        info = parse_towing_info(raw)
        logger.info(
            "[TOWING] %s %s %s: %s (%s)",
            info.vehicle.year, info.vehicle.make, info.vehicle.model,
            info.towing_safety_level.value, info.drivetrain,
        )
        return info

    def search(self, params: SearchParams) -> TowingInfo:
        query = params.to_query()
        if not query:
            raise InvalidQuery("Enter at least a make or model to search.")
        return self.get_towing_info(query)

    def read_vin(self, image: bytes) -> str:
        vin = extract_vin(self.backend, image)
        if vin is None:
            raise ExtractionNotFound("vin", "Could not extract a valid 17-character VIN from the image. Please try a clearer picture.")
        return vin

    def identify_and_search(self, image: bytes) -> Tuple[str, TowingInfo]:
        result = identify_vehicle(self.backend, image)
        if isinstance(result, IdentificationFailed):
            raise ExtractionNotFound("vehicle", result.error)
        query = result.to_query()
        return query, self.get_towing_info(query)

    def scan_code(self, image: bytes) -> ScanResult:
        """Classify a VIN/plate photo, read the VIN from it and look the vehicle up."""
        code_type = classify_code_type(self.backend, image)
        logger.info("[SCAN] Image classified as '%s'", code_type)

        if code_type == "vin":
            vin = self.read_vin(image)
        elif code_type == "plate":
            vin = self._decode_plate(image)
        else:
            raise ExtractionNotFound(
                "code",
                "Could not detect a VIN or a license plate. Try a clearer image or identify the vehicle by photo instead.",
            )

        query = format_vin_query(vin)
        return ScanResult(code_type=code_type, vin=vin, query=query, towing_info=self.get_towing_info(query))

    def _decode_plate(self, image: bytes) -> str:
        if self.plate_decoder is None:
            raise ExtractionNotFound("plate", "License plate decoding is not available.")
        vin = self.plate_decoder.decode_plate_to_vin(image)
        if not vin or not is_valid_vin(vin):
            raise ExtractionNotFound(
                "plate",
                "Could not decode a VIN from the license plate. Please try another image or enter details manually.",
            )
        return vin
