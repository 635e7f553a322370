from .resume import (
	ContactInfo,
	Entry,
	ResumeFormState,
	ContactSchema,
	EntrySchema,
	ResumeSchema,
	ResumeRead,
	collect_field_errors,
)
from .user import EmailAddress, ExternalIdentity, UserRead, UserSingleResponse

__all__ = [
	"ContactInfo",
	"Entry",
	"ResumeFormState",
	"ContactSchema",
	"EntrySchema",
	"ResumeSchema",
	"ResumeRead",
	"collect_field_errors",
	"EmailAddress",
	"ExternalIdentity",
	"UserRead",
	"UserSingleResponse",
]
