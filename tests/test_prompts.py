import pytest
from pydantic import ValidationError

from errors import InvalidQuery
from prompts import (
    build_code_classification_request,
    build_make_correction_request,
    build_options_request,
    build_towing_request,
    build_vehicle_identification_request,
    build_vin_extraction_request,
)
from schemas import TOWING_INFO_REQUIRED, TOWING_INFO_SCHEMA


@pytest.mark.parametrize("query", ["2022 Subaru Outback", "  VIN 1HGCM82633A004352 ", "{weird} query"])
def test_towing_request_references_full_schema(query):
    request = build_towing_request(query)
    assert request.response_schema == TOWING_INFO_SCHEMA
    assert set(TOWING_INFO_REQUIRED) <= set(request.response_schema["properties"])
    assert request.response_schema["required"] == TOWING_INFO_REQUIRED
    assert query.strip() in request.prompt


@pytest.mark.parametrize("query", ["", "   ", "\n\t", None])
def test_blank_query_is_refused(query):
    with pytest.raises(InvalidQuery):
        build_towing_request(query)
    with pytest.raises(InvalidQuery):
        build_options_request(query)


# The towing policy lives in the prompt text; these clauses must not drift.
@pytest.mark.parametrize("clause", [
    "completely OFF, with no key in the ignition, and the transmission is in PARK",
    "**1. FWD (Front-Wheel Drive):**",
    "**2. RWD (Rear-Wheel Drive):**",
    "**3. Part-Time 4WD",
    "**4. Full-Time AWD",
    "**5. EV & Hybrid Vehicles:**",
    "**Default for ALL Full-Time AWD is 'UNSAFE' for any two-wheel lift tow.**",
    "'towingSafetyLevel' MUST be 'DOLLY_REQUIRED'",
    "A procedure to put the transfer case into a true Neutral (N) that disconnects both axles.",
    'A specific "FWD" service fuse that reliably disengages the rear axle.',
    'An electronic "Tow Mode" that can be activated and remains active with the vehicle completely OFF and NO KEY.',
    "**Parking Pawl:** Always mention the risk of damaging the transmission's parking pawl",
    "you MUST include instructions in the 'rearTowing.instructions' to secure the wheel",
    "you MUST omit the 'awdVariantInfo' field entirely",
    "isDrivetrainEngagedWhenOff",
])
def test_towing_prompt_policy_clauses(clause):
    assert clause in build_towing_request("2020 Honda Civic").prompt


def test_towing_prompt_uses_canonical_engagement_field():
    assert "isAwdMechanicallyEngagedWhenOff" not in build_towing_request("2020 Honda Civic").prompt


def test_options_prompt_excludes_commerce_terms():
    request = build_options_request("models for 2021 Subaru", limit=50)
    assert '"models for 2021 Subaru"' in request.prompt
    assert '"for sale"' in request.prompt
    assert "prices, colors" in request.prompt
    assert "maximum of 50" in request.prompt
    assert '{"options": ["F-150", "Explorer", "Mustang", "Escape"]}' in request.prompt
    assert request.response_schema["required"] == ["options"]


def test_make_correction_prompt():
    request = build_make_correction_request("Suburu")
    assert '"Suburu"' in request.prompt
    assert '{"correctedMake": "Chevrolet"}' in request.prompt


def test_image_requests():
    assert "NOT_FOUND" in build_vin_extraction_request().prompt
    assert build_vin_extraction_request().response_schema is None
    assert build_vehicle_identification_request().response_schema["properties"].keys() >= {"make", "model", "error"}
    assert build_code_classification_request().response_schema["properties"]["codeType"]["enum"] == ["vin", "plate", "none"]


def test_requests_are_read_only():
    request = build_vin_extraction_request()
    with pytest.raises(ValidationError):
        request.prompt = "changed"
