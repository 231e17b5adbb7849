import copy

import pytest


class FakeBackend:
    """Scripted stand-in for the generative backend; records every call."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def generate(self, prompt, schema=None, image=None, temperature=None):
        self.calls.append({"prompt": prompt, "schema": schema, "image": image, "temperature": temperature})
        if not self.responses:
            raise AssertionError("FakeBackend received an unexpected call")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


SUBARU_OUTBACK = {
    "vehicle": {"year": 2022, "make": "Subaru", "model": "Outback", "trim": "Unknown"},
    "drivetrain": "Full-Time AWD",
    "awdSystemType": "Active Torque Split (clutch pack)",
    "isDrivetrainEngagedWhenOff": True,
    "steeringLocksWhenOff": False,
    "towingSafetyLevel": "DOLLY_REQUIRED",
    "summary": "Full-time AWD: use a flatbed or place the grounded wheels on dollies.",
    "frontTowing": {
        "safetyLevel": "UNSAFE",
        "instructions": "Do not tow with the rear wheels on the ground.\nPlace rear wheels on dollies.",
    },
    "rearTowing": {
        "safetyLevel": "UNSAFE",
        "instructions": "Do not tow with the front wheels on the ground.\nSecure the steering wheel using the seatbelt.",
    },
    "cautions": ["Dragging the drive wheels in Park can damage the parking pawl."],
}

HONDA_CIVIC = {
    "vehicle": {"year": 2020, "make": "Honda", "model": "Civic", "trim": "LX"},
    "drivetrain": "FWD",
    "awdSystemType": "N/A",
    "isDrivetrainEngagedWhenOff": False,
    "steeringLocksWhenOff": True,
    "towingSafetyLevel": "SAFE",
    "summary": "Front-lift tow is the standard safe method.",
    "frontTowing": {"safetyLevel": "SAFE", "instructions": "Lift the front wheels.\nSecure the vehicle with wheel straps."},
    "rearTowing": {
        "safetyLevel": "SAFE_WITH_CAUTION",
        "instructions": "Shift the transmission to Neutral.\nLimit distance and speed to avoid transmission damage.",
    },
    "cautions": ["Do not drag the front wheels in Park; the parking pawl can break."],
    "anecdotalAdvice": ["Neutral can be selected with the shift lock release under the small cover."],
}


@pytest.fixture
def subaru_payload():
    return copy.deepcopy(SUBARU_OUTBACK)


@pytest.fixture
def civic_payload():
    return copy.deepcopy(HONDA_CIVIC)


@pytest.fixture
def make_backend():
    return FakeBackend
