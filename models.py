from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel


class TowingSafetyLevel(str, Enum):
    SAFE = "SAFE"
    CAUTION = "CAUTION"
    DOLLY_REQUIRED = "DOLLY_REQUIRED"


class TowingMethodSafetyLevel(str, Enum):
    SAFE = "SAFE"
    SAFE_WITH_CAUTION = "SAFE_WITH_CAUTION"
    UNSAFE = "UNSAFE"


CodeType = Literal["vin", "plate", "none"]


class _Record(BaseModel):
    # Read-only value objects, field names on the wire are camelCase
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class VehicleDescriptor(_Record):
    year: int
    make: str
    model: str
    trim: str


class TowingMethod(_Record):
    safety_level: TowingMethodSafetyLevel
    instructions: str

    @property
    def steps(self) -> List[str]:
        """Instructions split into their non-empty lines."""
        return [line.strip() for line in self.instructions.splitlines() if line.strip()]


class AWDVariantInfo(_Record):
    summary: str
    front_towing: TowingMethod
    rear_towing: TowingMethod
    cautions: List[str]
    awd_system_type: str
    is_drivetrain_engaged_when_off: bool
    steering_locks_when_off: bool


class TowingInfo(_Record):
    vehicle: VehicleDescriptor
    drivetrain: str
    awd_system_type: str
    is_drivetrain_engaged_when_off: bool
    steering_locks_when_off: bool
    towing_safety_level: TowingSafetyLevel
    summary: str
    front_towing: TowingMethod
    rear_towing: TowingMethod
    cautions: List[str]
    anecdotal_advice: Optional[List[str]] = None
    unlock_advice: Optional[List[str]] = None
    awd_variant_info: Optional[AWDVariantInfo] = None


# --- Vehicle identification: success or failure, never both ---

class VehicleIdentified(_Record):
    make: str
    model: str
    year: Optional[int] = None

    def to_query(self) -> str:
        parts = [str(self.year) if self.year else "", self.make, self.model]
        return " ".join(part for part in parts if part)


class IdentificationFailed(_Record):
    error: str


VehicleIdentificationResult = Union[VehicleIdentified, IdentificationFailed]


class SearchParams(_Record):
    """Structured search form fields, any of which may be left blank."""

    year: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    trim: Optional[str] = None

    @field_validator("year", mode="before")
    @classmethod
    def _year_as_text(cls, value):
        if isinstance(value, int):
            return str(value)
        return value

    def to_query(self) -> str:
        parts = [self.year, self.make, self.model, self.trim]
        return " ".join(part.strip() for part in parts if part and part.strip())
