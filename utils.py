import base64
import binascii
import re

# --- Constants ---
COMMON_MAKES = [
    "Acura", "Audi", "BMW", "Buick", "Cadillac", "Chevrolet", "Chrysler", "Dodge", "Ford", "GMC",
    "Honda", "Hyundai", "Infiniti", "Jaguar", "Jeep", "Kia", "Land Rover", "Lexus", "Lincoln",
    "Mazda", "Mercedes-Benz", "Mitsubishi", "Nissan", "Porsche", "Ram", "Subaru", "Tesla",
    "Toyota", "Volkswagen", "Volvo",
]

# Abbreviations resolved without asking the model (keys lowercase)
MAKE_ALIASES = {
    "vw": "Volkswagen",
    "chevy": "Chevrolet",
    "chev": "Chevrolet",
    "merc": "Mercedes-Benz",
    "mercedes": "Mercedes-Benz",
    "benz": "Mercedes-Benz",
    "landrover": "Land Rover",
    "caddy": "Cadillac",
    "bimmer": "BMW",
}

# Words that mark an entry as commentary or shopping text rather than a vehicle option
OPTION_NOISE_KEYWORDS = ["for sale", "used", "price", "$", "note:", "here are", "color"]

DRIVETRAIN_GUIDE = [
    {
        "id": "fwd",
        "title": "FWD (Front-Wheel Drive)",
        "description": (
            "Power is sent to the front wheels. The safest method is to lift the front wheels off the ground "
            "(a \"front tow\"). Towing with the front drive wheels on the ground can cause transmission damage."
        ),
    },
    {
        "id": "rwd",
        "title": "RWD (Rear-Wheel Drive)",
        "description": (
            "Power is sent to the rear wheels. The safest method is to lift the rear wheels off the ground "
            "(a \"rear tow\"). Towing with the rear drive wheels on the ground can cause severe transmission "
            "damage from the driveshaft spinning without lubrication."
        ),
    },
    {
        "id": "part-time-4wd",
        "title": "Part-Time 4WD",
        "description": (
            "The driver manually engages 4WD. When in 2WD it behaves like a RWD vehicle: lift the rear wheels. "
            "If the transfer case has a true Neutral position it may be possible to tow with all four wheels "
            "down, but this must be confirmed. If unsure, use a flatbed."
        ),
    },
    {
        "id": "full-time-awd",
        "title": "Full-Time AWD",
        "description": (
            "Power is constantly sent to all four wheels through a center differential. Never tow these "
            "vehicles with any wheels on the ground. A flatbed or dollies are mandatory."
        ),
    },
    {
        "id": "on-demand-awd",
        "title": "On-Demand / Automatic AWD",
        "description": (
            "The vehicle runs as FWD or RWD and engages the other axle when slip is detected, which can happen "
            "with the engine off if the wheels turn at different speeds. Always use a flatbed or dollies."
        ),
    },
    {
        "id": "ev",
        "title": "EV & Hybrid",
        "description": (
            "Electric motors are connected to the wheels. Towing with drive wheels on the ground can make the "
            "motors generate electricity, damaging motors, controllers or the battery. Dollies or a flatbed "
            "are almost always required unless a specific \"Tow Mode\" is activated."
        ),
    },
]


# --- Helper Functions ---
def is_effectively_none_or_absent(param_val):
    if param_val is None:
        return True
    if isinstance(param_val, str) and param_val.strip().lower() in ["", "null", "none", "unknown", "n/a"]:
        return True
    return False


def is_option_noise(option):
    """True for entries that are explanations or shopping terms instead of an option name."""
    s = option.strip().lower()
    if len(s) > 60 or s.endswith(":"):
        return True
    return any(keyword in s for keyword in OPTION_NOISE_KEYWORDS)


def dedupe_options(options, limit):
    seen = set()
    cleaned = []
    for option in options:
        if not isinstance(option, str) or is_effectively_none_or_absent(option):
            continue
        option = option.strip()
        if is_option_noise(option):
            continue
        key = option.casefold()
        if key in seen:
            continue
        seen.add(key)
        cleaned.append(option)
        if len(cleaned) >= limit:
            break
    return cleaned


def format_vin_query(vin):
    return f"VIN {vin}"


def decode_image_payload(payload: str) -> bytes:
    """Decode a base64 image, with or without a data URL prefix ("data:image/jpeg;base64,...")."""
    if not payload or not payload.strip():
        raise ValueError("Image payload is empty.")
    if payload.startswith("data:") and "," in payload:
        payload = payload.split(",", 1)[1]
    payload = re.sub(r"\s+", "", payload)
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Image payload is not valid base64: {e}") from e
