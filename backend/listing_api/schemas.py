from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from listing_api.models import Property, User


class _CamelModel(BaseModel):
    # Wire names are camelCase; snake_case is accepted too.
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


# -----------------------
# Users
# -----------------------
class RegisterIn(_CamelModel):
    first_name: str = Field(min_length=1)
    last_name: str = Field(min_length=1)
    phone_number: str = Field(min_length=1)
    email: str = Field(min_length=3)
    profile_pic_url: str | None = None
    password: str = Field(min_length=1)


class LoginIn(_CamelModel):
    email: str
    password: str


class UserAccIn(_CamelModel):
    user_id: int


class UserUpdate(_CamelModel):
    """
    Fields a client may change on its own profile. Email and password are not editable here.
    """

    first_name: str | None = Field(default=None, min_length=1)
    last_name: str | None = Field(default=None, min_length=1)
    phone_number: str | None = Field(default=None, min_length=1)
    profile_pic_url: str | None = None
    liked_properties: list[int] | None = None


# -----------------------
# Views
# -----------------------
class ViewIn(_CamelModel):
    user_id: int
    property_id: int


# -----------------------
# Properties
# -----------------------
class PropertyCreate(_CamelModel):
    # Unknown keys (views, _id, ...) are dropped on create; patches stay strict.
    model_config = ConfigDict(extra="ignore")

    contact_email: str | None = None
    contact_number: str | None = None
    contact_name: str | None = None
    features: list[str] = Field(default_factory=list)
    image_urls: list[str] = Field(default_factory=list)
    liked: bool | None = None
    title: str | None = None
    location: str | None = None
    lat: str | None = None
    lng: str | None = None
    price: str | None = None
    rating: str | None = None
    bedrooms: str | None = None
    bathrooms: str | None = None
    area: str | None = None
    type: str | None = None
    description: str | None = None


class PropertyUpdate(_CamelModel):
    """
    Partial update. Only provided fields are written; `views` is owned by the view policy.
    """

    contact_email: str | None = None
    contact_number: str | None = None
    contact_name: str | None = None
    features: list[str] | None = None
    image_urls: list[str] | None = None
    liked: bool | None = None
    title: str | None = None
    location: str | None = None
    lat: str | None = None
    lng: str | None = None
    price: str | None = None
    rating: str | None = None
    bedrooms: str | None = None
    bathrooms: str | None = None
    area: str | None = None
    type: str | None = None
    description: str | None = None


# -----------------------
# Output
# -----------------------
def user_out(u: User) -> dict[str, Any]:
    # The password hash never leaves the server.
    return {
        "id": u.id,
        "firstName": u.first_name,
        "lastName": u.last_name,
        "email": u.email,
        "phoneNumber": u.phone_number,
        "profilePicUrl": u.profile_pic_url,
        "likedProperties": list(u.liked_properties or []),
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def property_out(p: Property) -> dict[str, Any]:
    return {
        "id": p.id,
        "contactEmail": p.contact_email,
        "contactNumber": p.contact_number,
        "contactName": p.contact_name,
        "features": list(p.features or []),
        "imageUrls": list(p.image_urls or []),
        "liked": p.liked,
        "title": p.title,
        "location": p.location,
        "lat": p.lat,
        "lng": p.lng,
        "price": p.price,
        "rating": p.rating,
        "bedrooms": p.bedrooms,
        "bathrooms": p.bathrooms,
        "area": p.area,
        "type": p.type,
        "description": p.description,
        "views": int(p.views or 0),
        "createdAt": p.created_at.isoformat() if p.created_at else None,
        "updatedAt": p.updated_at.isoformat() if p.updated_at else None,
    }
