from typing import Optional

from langchain_core.prompts import PromptTemplate
from pydantic import BaseModel, ConfigDict

from config import settings
from errors import InvalidQuery
from schemas import (
    CODE_TYPE_SCHEMA,
    CORRECTED_MAKE_SCHEMA,
    TOWING_INFO_SCHEMA,
    VEHICLE_IDENTIFICATION_SCHEMA,
    VEHICLE_OPTIONS_SCHEMA,
)


class LLMRequest(BaseModel):
    """One call to the generative backend: instructions plus the schema the answer must follow."""

    model_config = ConfigDict(frozen=True)

    prompt: str
    response_schema: Optional[dict] = None
    temperature: Optional[float] = None


towing_prompt = PromptTemplate(
    input_variables=["query"],
    template="""You are an expert resource for professional tow truck operators using a standard wheel-lift. Your knowledge base is a synthesis of manufacturer service manuals, drivetrain engineering principles, and real-world, field-tested information from sources like Tow Times Magazine and online operator forums.

Analyze the following vehicle: "{query}"

Your response MUST be a single, validated JSON object that strictly adheres to the provided schema.

**CRITICAL CONTEXT: For your entire analysis, you must assume every vehicle is completely OFF, with no key in the ignition, and the transmission is in PARK (or its equivalent state).**

PRIMARY ANALYSIS RULES:
1.  Your primary analysis should be for the most common drivetrain for the given model. Do NOT assume it is the AWD/4WD version.
2.  If an AWD or 4WD variant of this model exists and has DIFFERENT towing procedures, you MUST populate the 'awdVariantInfo' field with its specific towing details, including BOTH 'frontTowing' and 'rearTowing'. If no AWD variant exists, or its towing procedure is identical to the base model, you MUST omit the 'awdVariantInfo' field entirely.
3.  If the vehicle cannot be recognized, leave 'vehicle.make' and 'vehicle.model' empty. Do NOT invent a vehicle.

**EXPERT WHEEL-LIFT TOWING LOGIC:**
Your recommendations must be based on a deep understanding of the following drivetrain types.

*   **1. FWD (Front-Wheel Drive):**
    *   **Front Tow (lifting front drive wheels):** The default 'SAFE' method.
    *   **Rear Tow (front drive wheels on ground):** 'UNSAFE' by default. This is only 'SAFE_WITH_CAUTION' if the transmission can be placed in Neutral. The instructions MUST state the need for Neutral, warn about securing the non-locking steering wheel, and mention that towing for long distances or at high speed can cause transmission damage due to lack of lubrication.

*   **2. RWD (Rear-Wheel Drive):**
    *   **Rear Tow (lifting rear drive wheels):** The default 'SAFE' method.
    *   **Front Tow (rear drive wheels on ground):** 'UNSAFE' due to high risk of transmission damage from the unlubricated, spinning driveshaft. This is only 'SAFE_WITH_CAUTION' if a reliable, field-tested procedure exists to disconnect the rear driveshaft. If so, instructions must be detailed, including professional tips like "Mark the driveshaft's orientation before removal to ensure balanced reinstallation."

*   **3. Part-Time 4WD (e.g., traditional trucks/SUVs with 2H, 4H, 4L modes):**
    *   First, determine if the transfer case is in 2H. If it is, the vehicle behaves as a RWD vehicle. Apply the RWD logic above. This is the most common scenario.
    *   If the transfer case is stuck in 4H or 4L, it must be treated as a Full-Time AWD vehicle below. The instructions must emphasize that towing in 4WD mode will cause severe drivetrain binding and damage.

*   **4. Full-Time AWD (e.g., Subaru, Audi Quattro, many modern SUVs):**
    *   **Default for ALL Full-Time AWD is 'UNSAFE' for any two-wheel lift tow.** A flatbed or dollies are the only guaranteed safe methods, and the overall 'towingSafetyLevel' MUST be 'DOLLY_REQUIRED'.
    *   For the `isDrivetrainEngagedWhenOff` property: Determine if a mechanical link (viscous coupling, default-locked clutch pack, center differential) persists between front and rear axles when OFF. If so, set to `true`.
    *   A 'SAFE_WITH_CAUTION' classification is ONLY permissible if you find a specific, trusted, field-tested procedure for this exact model, such as:
        1.  A procedure to put the transfer case into a true Neutral (N) that disconnects both axles.
        2.  A specific "FWD" service fuse that reliably disengages the rear axle.
        3.  An electronic "Tow Mode" that can be activated and remains active with the vehicle completely OFF and NO KEY.
    *   If such a procedure is found, the 'instructions' MUST be extremely detailed about how to perform it and explain the risks, and the 'summary' MUST name the procedure.

*   **5. EV & Hybrid Vehicles:**
    *   **Default procedure is to use dollies for the wheels remaining on the ground.** Any two-wheel tow without dollies is 'UNSAFE' by default due to the high risk of damaging motors, batteries, and power electronics from uncontrolled regenerative braking.
    *   If a manufacturer-specified "Tow Mode" or "Neutral Mode" exists that explicitly allows for two-wheel towing without dollies, you may classify that specific method as 'SAFE_WITH_CAUTION'. The instructions must be precise on how to activate it and what limitations apply.
    *   If NO such mode exists (or cannot be confirmed), then BOTH front and rear towing methods must be classified as 'SAFE_WITH_CAUTION', and their instructions MUST explicitly state that dollies are required for the wheels on the ground. For example, the front tow instruction should be "Place rear wheels on dollies. Failure to do so can cause severe damage to the electric motors and battery system."

**GENERAL PRINCIPLES TO APPLY:**
*   **Parking Pawl:** Always mention the risk of damaging the transmission's parking pawl if a vehicle's drive wheels are dragged even a short distance while in Park.
*   **Steering Lock:** You MUST determine if the steering locks when off. If 'steeringLocksWhenOff' is 'false', you MUST include instructions in the 'rearTowing.instructions' to secure the wheel (e.g., "using the seatbelt or a dedicated steering wheel clamp").
*   **Instructions Format:** Write every 'instructions' value as a list of steps, one step per line.

**OPTIONAL FIELD-TESTED CONTENT:**
*   'anecdotalAdvice': short, practical tips that veteran operators share about this exact vehicle. Omit the field if you know none.
*   'unlockAdvice': how to get this vehicle out of Park or into a towable state when it is locked, the battery is dead, or the key is missing. Omit the field if you know none.""",
)

options_prompt = PromptTemplate(
    input_variables=["query", "limit"],
    template="""You are a vehicle database expert. For the query "{query}", list the most common vehicle options.
- The response MUST be a valid JSON object with a single key: "options".
- The value of "options" MUST be an array of strings.
- Each string should be a single vehicle option name only: a make, model or trim name, or a model year when years are requested.
- Do NOT include descriptions or any other information.
- Do NOT include shopping terms such as "used", "new", "for sale", "certified", prices, colors or dealer names.
- Limit the list to a maximum of {limit} of the most relevant options.
- Example for 'models for Ford': {{"options": ["F-150", "Explorer", "Mustang", "Escape"]}}""",
)

make_correction_prompt = PromptTemplate(
    input_variables=["make"],
    template="""You are a vehicle data expert. Correct the spelling or find the canonical manufacturer name for the following input: "{make}". Your response must be a single JSON object with the key "correctedMake" containing the corrected string. For example, if the input is "Chevy" or "Chev", you should return {{"correctedMake": "Chevrolet"}}. If the input is already correct, return the original input.""",
)

VIN_EXTRACTION_PROMPT = """Extract the 17-character Vehicle Identification Number (VIN) from this image.
A VIN uses only digits and the capital letters A-Z except I, O and Q.
Return ONLY the VIN as a string. If no VIN is visible or it is illegible, return NOT_FOUND. Do not include any other text."""

VEHICLE_IDENTIFICATION_PROMPT = """You are an automotive expert. Identify the vehicle in this photo.
- If you can identify it, return a JSON object with "make", "model" and, if you can estimate it, "year".
- If the image does not show a vehicle or you cannot tell the make and model, return {"error": "<short reason>"} instead.
- Never return both a vehicle and an error."""

CODE_CLASSIFICATION_PROMPT = """Look at this image and decide what it mainly shows.
- "vin": a Vehicle Identification Number plate, sticker or windshield tag.
- "plate": a vehicle license plate.
- "none": anything else.
Return a JSON object with a single key "codeType" set to one of "vin", "plate" or "none"."""


def _require_text(value: str, what: str) -> str:
    if value is None or not str(value).strip():
        raise InvalidQuery(f"{what} must not be empty.")
    return str(value).strip()


def build_towing_request(query: str) -> LLMRequest:
    """Towing analysis request for a free-text vehicle description, e.g. "2021 Ford F-150 Lariat"."""
    query = _require_text(query, "Vehicle query")
    return LLMRequest(
        prompt=towing_prompt.format(query=query),
        response_schema=TOWING_INFO_SCHEMA,
        temperature=settings.LLM_TEMPERATURE,
    )


def build_options_request(query: str, limit: int = None) -> LLMRequest:
    query = _require_text(query, "Options query")
    return LLMRequest(
        prompt=options_prompt.format(query=query, limit=limit or settings.SUGGESTION_LIMIT),
        response_schema=VEHICLE_OPTIONS_SCHEMA,
        temperature=settings.SUGGESTION_TEMPERATURE,
    )


def build_make_correction_request(make: str) -> LLMRequest:
    make = _require_text(make, "Make")
    return LLMRequest(
        prompt=make_correction_prompt.format(make=make),
        response_schema=CORRECTED_MAKE_SCHEMA,
        temperature=settings.SUGGESTION_TEMPERATURE,
    )


# VIN answers are plain text, filtered afterwards
def build_vin_extraction_request() -> LLMRequest:
    return LLMRequest(prompt=VIN_EXTRACTION_PROMPT, temperature=0.0)


def build_vehicle_identification_request() -> LLMRequest:
    return LLMRequest(
        prompt=VEHICLE_IDENTIFICATION_PROMPT,
        response_schema=VEHICLE_IDENTIFICATION_SCHEMA,
        temperature=settings.LLM_TEMPERATURE,
    )


def build_code_classification_request() -> LLMRequest:
    return LLMRequest(prompt=CODE_CLASSIFICATION_PROMPT, response_schema=CODE_TYPE_SCHEMA, temperature=0.0)
