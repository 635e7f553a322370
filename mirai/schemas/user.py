from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class EmailAddress(BaseModel):
    id: Optional[str] = None
    emailAddress: str


class ExternalIdentity(BaseModel):
    """The signed-in principal as described by the identity provider."""
    id: str
    firstName: Optional[str] = None
    lastName: Optional[str] = None
    imageUrl: Optional[str] = None
    emailAddresses: List[EmailAddress] = Field(default_factory=list)
    primaryEmailAddressId: Optional[str] = None

    @property
    def primary_email(self) -> Optional[str]:
        """Primary address when flagged, otherwise the first one listed."""
        for address in self.emailAddresses:
            if self.primaryEmailAddressId and address.id == self.primaryEmailAddressId:
                return address.emailAddress
        if self.emailAddresses:
            return self.emailAddresses[0].emailAddress
        return None

    @property
    def display_name(self) -> str:
        return f"{self.firstName or ''} {self.lastName or ''}".strip()


class UserRead(BaseModel):
    id: str
    clerkUserId: str
    email: str
    name: Optional[str] = None
    imageUrl: Optional[str] = None
    industry: Optional[str] = None
    bio: Optional[str] = None
    experience: Optional[int] = None
    skills: Optional[List[str]] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None

    model_config = {"from_attributes": True}


class UserSingleResponse(BaseModel):
    status: int
    message: str
    data: Optional[UserRead] = None
