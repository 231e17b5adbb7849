"""
Response schemas handed to the generative backend for constrained decoding.

Written in the JSON-schema subset understood by both Gemini's ``response_schema``
and Ollama's ``format`` option. The pydantic records in ``models`` mirror these
shapes and are what the parser validates against.
"""

TOWING_METHOD_SAFETY_LEVELS = ["SAFE", "SAFE_WITH_CAUTION", "UNSAFE"]
TOWING_SAFETY_LEVELS = ["SAFE", "CAUTION", "DOLLY_REQUIRED"]
CODE_TYPES = ["vin", "plate", "none"]

TOWING_METHOD_SCHEMA = {
    "type": "object",
    "properties": {
        "safetyLevel": {
            "type": "string",
            "enum": TOWING_METHOD_SAFETY_LEVELS,
            "description": "The safety classification for this specific towing method.",
        },
        "instructions": {
            "type": "string",
            "description": "Step-by-step instructions, one step per line, including any warnings or limitations for this method.",
        },
    },
    "required": ["safetyLevel", "instructions"],
}

_STRING_LIST = {"type": "array", "items": {"type": "string"}}

AWD_VARIANT_INFO_SCHEMA = {
    "type": "object",
    "description": (
        "Towing information specifically for the AWD/4WD trim of this vehicle. Omit this field "
        "entirely if no AWD/4WD variant exists or if its towing procedure is identical to the primary result."
    ),
    "properties": {
        "summary": {"type": "string", "description": "A brief summary of the towing recommendation for the AWD/4WD variant."},
        "frontTowing": TOWING_METHOD_SCHEMA,
        "rearTowing": TOWING_METHOD_SCHEMA,
        "cautions": dict(_STRING_LIST, description="Important warnings or cautions specific to the AWD/4WD variant."),
        "awdSystemType": {"type": "string", "description": "The specific type of AWD system for this variant (e.g., Haldex, Torsen)."},
        "isDrivetrainEngagedWhenOff": {
            "type": "boolean",
            "description": "True if the variant's drivetrain stays mechanically engaged (e.g., viscous coupling) when the vehicle is off.",
        },
        "steeringLocksWhenOff": {"type": "boolean", "description": "True if the steering column locks when the vehicle is off."},
    },
    "required": [
        "summary",
        "frontTowing",
        "rearTowing",
        "cautions",
        "awdSystemType",
        "isDrivetrainEngagedWhenOff",
        "steeringLocksWhenOff",
    ],
}

VEHICLE_SCHEMA = {
    "type": "object",
    "properties": {
        "year": {"type": "integer", "description": "The vehicle's model year."},
        "make": {"type": "string", "description": "The manufacturer of the vehicle."},
        "model": {"type": "string", "description": "The model of the vehicle."},
        "trim": {"type": "string", "description": "The specific trim level of the vehicle, or 'Unknown' if not specified."},
    },
    "required": ["year", "make", "model", "trim"],
}

TOWING_INFO_REQUIRED = [
    "vehicle",
    "drivetrain",
    "awdSystemType",
    "isDrivetrainEngagedWhenOff",
    "steeringLocksWhenOff",
    "towingSafetyLevel",
    "summary",
    "frontTowing",
    "rearTowing",
    "cautions",
]

TOWING_INFO_SCHEMA = {
    "type": "object",
    "properties": {
        "vehicle": VEHICLE_SCHEMA,
        "drivetrain": {
            "type": "string",
            "description": "The vehicle's primary/most common drivetrain (FWD, RWD, Part-Time 4WD, Full-Time AWD, EV/Hybrid).",
        },
        "awdSystemType": {
            "type": "string",
            "description": "The specific type of AWD system if the primary drivetrain is AWD (e.g., Haldex, Torsen). Use 'N/A' otherwise.",
        },
        "isDrivetrainEngagedWhenOff": {
            "type": "boolean",
            "description": "True if the drivetrain remains mechanically engaged between axles when the vehicle is off. Use false if not AWD/4WD.",
        },
        "steeringLocksWhenOff": {"type": "boolean", "description": "True if the steering column locks when the vehicle is off."},
        "towingSafetyLevel": {
            "type": "string",
            "enum": TOWING_SAFETY_LEVELS,
            "description": "A single, overall classification of the towing risk for the primary vehicle.",
        },
        "summary": {"type": "string", "description": "A brief, one-sentence summary of the towing recommendation for the primary vehicle."},
        "frontTowing": TOWING_METHOD_SCHEMA,
        "rearTowing": TOWING_METHOD_SCHEMA,
        "cautions": dict(_STRING_LIST, description="Important general warnings or cautions for the primary vehicle."),
        "anecdotalAdvice": dict(
            _STRING_LIST,
            description="Field-tested tips from experienced wheel-lift operators for this vehicle. Omit if none are known.",
        ),
        "unlockAdvice": dict(
            _STRING_LIST,
            description="How to get this vehicle into a towable state when it is locked or the key is missing. Omit if none are known.",
        ),
        "awdVariantInfo": AWD_VARIANT_INFO_SCHEMA,
    },
    "required": TOWING_INFO_REQUIRED,
}

VEHICLE_OPTIONS_SCHEMA = {
    "type": "object",
    "properties": {"options": _STRING_LIST},
    "required": ["options"],
}

CORRECTED_MAKE_SCHEMA = {
    "type": "object",
    "properties": {"correctedMake": {"type": "string"}},
    "required": ["correctedMake"],
}

# Either a vehicle or an error; the backend schema cannot express the exclusivity,
# the parser enforces it.
VEHICLE_IDENTIFICATION_SCHEMA = {
    "type": "object",
    "properties": {
        "year": {"type": "integer", "description": "Model year if it can be estimated."},
        "make": {"type": "string"},
        "model": {"type": "string"},
        "error": {"type": "string", "description": "Why the vehicle could not be identified."},
    },
}

CODE_TYPE_SCHEMA = {
    "type": "object",
    "properties": {"codeType": {"type": "string", "enum": CODE_TYPES}},
    "required": ["codeType"],
}
