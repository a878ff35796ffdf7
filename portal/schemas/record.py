"""
Typed onboarding record.

The record is stored as a JSON document with camelCase keys. Every field
carries a default, and a stored value that fails validation falls back to
that default instead of failing the whole load.
"""
from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    ValidatorFunctionWrapHandler,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class Stage(str, Enum):
    """Coarse onboarding phase."""
    APPLICATION = "application"
    SHIFT_SELECTION = "shift_selection"
    ONBOARDING = "onboarding"
    START_WORKING = "start_working"


class StepId(str, Enum):
    """Canonical checklist steps."""
    APPLICATION = "application"
    SHIFT_SELECTION = "shift_selection"
    DOCS = "docs"
    FIRST_DAY = "first_day"


class ShiftChoice(str, Enum):
    """Work shift options, empty means nothing picked yet."""
    NONE = ""
    EARLY = "early"
    MID = "mid"
    LATE = "late"


# Timestamps live in table columns, not in the JSON document
TIMESTAMP_FIELDS = ("createdAt", "updatedAt", "lastLoginAt")


class Document(BaseModel):
    """Base for every part of the record document."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    @field_validator("*", mode="wrap")
    @classmethod
    def _default_on_error(
        cls,
        value: Any,
        handler: ValidatorFunctionWrapHandler,
        info: ValidationInfo,
    ) -> Any:
        try:
            return handler(value)
        except ValidationError:
            return cls.model_fields[info.field_name].get_default(call_default_factory=True)


class Step(Document):
    id: str = ""
    label: str = ""
    done: bool = False


class Shift(Document):
    choice: ShiftChoice = ShiftChoice.NONE
    confirmed: bool = False

    @model_validator(mode="after")
    def _confirmed_needs_choice(self) -> "Shift":
        if self.choice == ShiftChoice.NONE:
            self.confirmed = False
        return self


class Appointment(Document):
    date: str = ""
    time: str = ""
    address: str = ""
    notes: str = ""

    @property
    def is_scheduled(self) -> bool:
        return bool(self.date or self.time or self.address)


class Contact(Document):
    name: str = ""
    phone: str = ""
    email: str = ""


class Contacts(Document):
    site_manager: Contact = Field(default_factory=lambda: Contact(name="Site Manager"))
    shift_lead: Contact = Field(default_factory=lambda: Contact(name="Shift Supervisor / Lead"))
    hr: Contact = Field(default_factory=lambda: Contact(name="HR / People Operations"))
    safety: Contact = Field(default_factory=lambda: Contact(name="Safety Officer"))

    def roles(self) -> List[tuple]:
        """Contacts in display order as (role label, contact) pairs."""
        return [
            ("Site Manager", self.site_manager),
            ("Shift Lead", self.shift_lead),
            ("HR", self.hr),
            ("Safety", self.safety),
        ]


class Notification(Document):
    id: str = ""
    title: str = ""
    body: str = ""
    action: str = ""
    route: str = ""


class I9(Document):
    ack: bool = False


class OnboardingRecord(Document):
    """A user's onboarding state."""

    stage: str = Stage.APPLICATION.value
    steps: List[Step] = Field(default_factory=list)
    shift: Shift = Field(default_factory=Shift)
    appointment: Appointment = Field(default_factory=Appointment)
    contacts: Contacts = Field(default_factory=Contacts)
    notifications: List[Notification] = Field(default_factory=list)
    i9: I9 = Field(default_factory=I9)

    full_name: str = ""
    phone: str = ""
    email: str = ""
    employee_id: str = ""
    role: str = "employee"
    status: str = "active"
    appointment_reminded_for: str = ""

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    # Set on the demonstration record only
    preview: bool = Field(default=False, exclude=True)

    @field_validator("stage", mode="before")
    @classmethod
    def _stage_as_text(cls, value: Any) -> str:
        if isinstance(value, Enum):
            return value.value
        return value if isinstance(value, str) else Stage.APPLICATION.value

    @classmethod
    def from_document(cls, document: Optional[dict], **timestamps: Any) -> "OnboardingRecord":
        """Validate a stored document, filling every missing or bad field with its default."""
        data = dict(document) if isinstance(document, dict) else {}
        data.update({k: v for k, v in timestamps.items() if v is not None})
        return cls.model_validate(data)

    def to_document(self) -> dict:
        """Serialize for storage, without the column-backed timestamps."""
        document = self.model_dump(by_alias=True, mode="json")
        for key in TIMESTAMP_FIELDS:
            document.pop(key, None)
        return document

    def step(self, step_id: str) -> Optional[Step]:
        for step in self.steps:
            if step.id == step_id:
                return step
        return None


def canonical_steps() -> List[Step]:
    """The four checklist steps every new record starts with."""
    return [
        Step(id=StepId.APPLICATION.value, label="Application", done=True),
        Step(id=StepId.SHIFT_SELECTION.value, label="Shift Selection", done=False),
        Step(id=StepId.DOCS.value, label="Complete Onboarding Documents", done=False),
        Step(id=StepId.FIRST_DAY.value, label="First Day Preparation", done=False),
    ]


def default_notifications() -> List[Notification]:
    return [
        Notification(
            id="n1",
            title="Reminder: Bring your I-9 documents on your first day",
            body="Make sure to bring acceptable documents for the I-9 form.",
            action="View I-9 Readiness",
            route="i9",
        ),
        Notification(
            id="n2",
            title="Please Confirm Your Work Shift",
            body="Select your preferred work schedule to confirm your shift.",
            action="Go to Shift Selection",
            route="shift",
        ),
    ]


def default_record(full_name: str = "", employee_id: str = "", email: str = "") -> OnboardingRecord:
    """Record created for a newly registered employee."""
    return OnboardingRecord(
        stage=Stage.SHIFT_SELECTION.value,
        steps=canonical_steps(),
        notifications=default_notifications(),
        full_name=full_name,
        employee_id=employee_id,
        email=email,
    )


def demo_record() -> OnboardingRecord:
    """Fixed demonstration record shown when no real record can be loaded."""
    return OnboardingRecord(
        stage=Stage.SHIFT_SELECTION.value,
        steps=canonical_steps(),
        notifications=default_notifications(),
        full_name="Preview Employee",
        employee_id="PREVIEW",
        appointment=Appointment(
            date="To be confirmed by HR",
            time="8:00 AM",
            address="Main facility, front entrance",
            notes="Bring two forms of ID.",
        ),
        preview=True,
    )
