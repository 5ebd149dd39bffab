from pydantic import BaseModel, EmailStr, Field

from app.schemas.common import CamelModel


class SubscribeRequest(BaseModel):
    """Request body for a digest subscription."""

    email: EmailStr


class PreferenceIn(CamelModel):
    """One interest filter. Empty fields match everything."""

    issuer_slug: str | None = Field(default=None, max_length=255)
    currency_code: str | None = Field(default=None, max_length=20)
    min_bonus: int | None = Field(default=None, ge=0)


class PreferenceOut(PreferenceIn):
    pass


class SubscriberOut(CamelModel):
    email: str
    email_verified: bool
    subscribed: bool
    preferences: list[PreferenceOut] = Field(default_factory=list)


class PreferencesUpdate(CamelModel):
    """Full replacement set of preferences."""

    preferences: list[PreferenceIn] = Field(default_factory=list, max_length=20)
