from typing import Optional

from pydantic import BaseModel, field_validator


ANONYMOUS = "Anonymous"


class Profile(BaseModel):
    id: str
    full_name: str = ANONYMOUS
    avatar_url: str = ""
    email: Optional[str] = None

    @field_validator("full_name", mode="before")
    @classmethod
    def default_name(cls, full_name: Optional[str]) -> str:
        return full_name or ANONYMOUS

    @field_validator("avatar_url", mode="before")
    @classmethod
    def default_avatar(cls, avatar_url: Optional[str]) -> str:
        return avatar_url or ""
