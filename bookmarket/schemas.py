# bookmarket/schemas.py
"""Request and response contracts.

Wire names are camelCase. Request bodies are strict: unknown fields are
rejected and values are never coerced between types.
"""
import math
from datetime import datetime
from typing import List, Optional, Union
from urllib.parse import urlparse

from pydantic import (
    BaseModel, ConfigDict, StrictFloat, StrictInt, StrictStr, ValidationInfo, field_validator,
)
from pydantic.alias_generators import to_camel

from .models import CONDITIONS
from .utils import strip_angle_brackets

MAX_PRICE = 10000

Price = Union[StrictInt, StrictFloat]


class RequestModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
    )


class ResponseModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ---- auth ----

class RegisterRequest(RequestModel):
    email: StrictStr
    password: StrictStr
    name: StrictStr

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        v = v.strip()
        if not v or "@" not in v or len(v) > 255:
            raise ValueError("Invalid email format")
        return v

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        if len(v) < 8 or len(v) > 100:
            raise ValueError("Password must be between 8-100 characters")
        return v

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        if len(v) < 2 or len(v) > 50:
            raise ValueError("Name must be between 2-50 characters")
        v = strip_angle_brackets(v)
        if not v:
            raise ValueError("Name must be between 2-50 characters")
        return v


class LoginRequest(RequestModel):
    email: StrictStr
    password: StrictStr

    @field_validator("email", "password")
    @classmethod
    def _required(cls, v: str, info: ValidationInfo) -> str:
        if info.field_name == "email":
            v = v.strip()
        if not v:
            raise ValueError("Email and password are required")
        return v


class ProfileUpdate(RequestModel):
    last_used_seller_profile: StrictStr

    @field_validator("last_used_seller_profile")
    @classmethod
    def _present(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Missing seller profile")
        return v.strip()


class SessionData(ResponseModel):
    """Identity carried inside the signed session token."""
    user_id: str
    email: str
    name: str
    admin: bool = False


class SessionOut(SessionData):
    last_used_seller_profile: str = ""


# ---- listings ----

class ListingRules(RequestModel):
    """Field rules shared by create and update bodies."""

    @field_validator("title", check_fields=False)
    @classmethod
    def _title(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Title is required and must be a string")
        v = strip_angle_brackets(v)
        if not v:
            raise ValueError("Title is required and must be a string")
        if len(v) > 200:
            raise ValueError("Title must be less than 200 characters")
        return v

    @field_validator("condition", check_fields=False)
    @classmethod
    def _condition(cls, v: Optional[str]) -> str:
        if v not in CONDITIONS:
            raise ValueError("Invalid condition. Must be one of: " + ", ".join(CONDITIONS))
        return v

    @field_validator("price", check_fields=False)
    @classmethod
    def _price(cls, v: Optional[float]) -> float:
        if v is None or not math.isfinite(v) or v < 0:
            raise ValueError("Price must be a valid positive number")
        if v > MAX_PRICE:
            raise ValueError(f"Price must not exceed {MAX_PRICE}")
        return round(v, 2)

    @field_validator("description", check_fields=False)
    @classmethod
    def _description(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("Description is required and must be a string")
        v = strip_angle_brackets(v)
        if len(v) < 10:
            raise ValueError("Description must be at least 10 characters long")
        if len(v) > 1000:
            raise ValueError("Description must be less than 1000 characters")
        return v

    @field_validator("seller_profile", check_fields=False)
    @classmethod
    def _seller_profile(cls, v: Optional[str]) -> str:
        if not v:
            raise ValueError("Seller profile URL is required")
        parsed = urlparse(v.strip())
        if not parsed.scheme or not (parsed.netloc or parsed.path):
            raise ValueError("Seller profile must be a valid URL")
        if parsed.scheme in ("http", "https") and not parsed.netloc:
            raise ValueError("Seller profile must be a valid URL")
        return v.strip()

    @field_validator("images", check_fields=False)
    @classmethod
    def _images(cls, v: Optional[List[str]]) -> List[str]:
        if not v:
            raise ValueError("At least one image is required")
        cleaned = []
        for ref in v:
            if not ref.strip():
                raise ValueError("All image URLs must be valid strings")
            cleaned.append(ref.strip())
        return cleaned


class ListingCreate(ListingRules):
    title: StrictStr
    condition: StrictStr
    price: Price
    description: StrictStr
    seller_profile: StrictStr
    images: List[StrictStr]


class ListingUpdate(ListingRules):
    title: Optional[StrictStr] = None
    condition: Optional[StrictStr] = None
    price: Optional[Price] = None
    description: Optional[StrictStr] = None
    seller_profile: Optional[StrictStr] = None
    images: Optional[List[StrictStr]] = None


class ListingOut(ResponseModel):
    id: str
    title: str
    condition: str
    price: float
    description: str
    seller_profile: str
    images: List[str]
    seller_name: str
    owner_id: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    pending_review: bool

    @field_validator("price", mode="before")
    @classmethod
    def _price_as_float(cls, v):
        return float(v)


# ---- uploads ----

class UploadOut(ResponseModel):
    url: str
    delete_hash: str
