from pydantic import BaseModel, Field, ValidationError, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError
from email_validator import validate_email, EmailNotValidError
from typing import Dict, List, Optional
from datetime import datetime


class ContactInfo(BaseModel):
    email: Optional[str] = None
    mobile: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None


class Entry(BaseModel):
    """One experience, education or project item of the builder form."""
    title: str = ""
    organization: str = ""
    startDate: str = ""
    endDate: Optional[str] = None
    description: str = ""
    current: bool = False


class ResumeFormState(BaseModel):
    """Draft form state. Every field may be empty while the user is typing."""
    contactInfo: ContactInfo = Field(default_factory=ContactInfo)
    summary: str = ""
    skills: str = ""
    experience: List[Entry] = Field(default_factory=list)
    education: List[Entry] = Field(default_factory=list)
    projects: List[Entry] = Field(default_factory=list)


def _require(value: Optional[str], message: str) -> str:
    if not value:
        raise PydanticCustomError("required", message)
    return value


class ContactSchema(BaseModel):
    email: Optional[str] = Field(default=None, validate_default=True)
    mobile: Optional[str] = None
    linkedin: Optional[str] = None
    twitter: Optional[str] = None

    @field_validator("email")
    @classmethod
    def _email(cls, v: Optional[str]) -> str:
        # Missing and malformed addresses get the same message
        _require(v, "Invalid email address")
        try:
            validate_email(v, check_deliverability=False)
        except EmailNotValidError:
            raise PydanticCustomError("invalid_email", "Invalid email address")
        return v


class EntrySchema(BaseModel):
    title: str = Field(default="", validate_default=True)
    organization: str = Field(default="", validate_default=True)
    startDate: str = Field(default="", validate_default=True)
    current: bool = False
    # declared after `current` so the validator can read it
    endDate: Optional[str] = Field(default=None, validate_default=True)
    description: str = Field(default="", validate_default=True)

    @field_validator("title")
    @classmethod
    def _title(cls, v: str) -> str:
        return _require(v, "Title is required")

    @field_validator("organization")
    @classmethod
    def _organization(cls, v: str) -> str:
        return _require(v, "Organization is required")

    @field_validator("startDate")
    @classmethod
    def _start_date(cls, v: str) -> str:
        return _require(v, "Start date is required")

    @field_validator("endDate")
    @classmethod
    def _end_date(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if not info.data.get("current") and not v:
            raise PydanticCustomError(
                "required", "End date is required unless this is your current position"
            )
        return v

    @field_validator("description")
    @classmethod
    def _description(cls, v: str) -> str:
        return _require(v, "Description is required")


class ResumeSchema(BaseModel):
    """Submission rules for the builder form."""
    contactInfo: ContactSchema
    summary: str = Field(default="", validate_default=True)
    skills: str = Field(default="", validate_default=True)
    experience: List[EntrySchema] = Field(default_factory=list)
    education: List[EntrySchema] = Field(default_factory=list)
    projects: List[EntrySchema] = Field(default_factory=list)

    @field_validator("summary")
    @classmethod
    def _summary(cls, v: str) -> str:
        return _require(v, "Professional summary is required")

    @field_validator("skills")
    @classmethod
    def _skills(cls, v: str) -> str:
        return _require(v, "Skills are required")


def collect_field_errors(state: ResumeFormState) -> Dict[str, str]:
    """Validate a draft against ResumeSchema and return ``{field path: message}``.

    Paths are dotted, e.g. ``contactInfo.email`` or ``experience.0.endDate``.
    Only the first message per field is kept.
    """
    try:
        ResumeSchema.model_validate(state.model_dump())
    except ValidationError as e:
        errors: Dict[str, str] = {}
        for err in e.errors():
            path = ".".join(str(part) for part in err["loc"])
            errors.setdefault(path, err["msg"])
        return errors
    return {}


class ResumeRead(BaseModel):
    id: str
    userId: str
    content: Optional[str] = None
    atsScore: Optional[float] = None
    feedback: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}
