"""Member Schemas - request bodies and responses for /members."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from library.core.entities import MemberDraft


class MemberRequest(BaseModel):
    """Create/update body. Email format is checked by the service."""
    name: str = Field(max_length=100)
    email: str = Field(max_length=150)
    phone: str = Field(max_length=30)

    def to_draft(self) -> MemberDraft:
        return MemberDraft(name=self.name, email=self.email, phone=self.phone)


class MemberResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    email: str
    phone: str
    registration_date: date
