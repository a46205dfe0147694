from pydantic import BaseModel, ConfigDict, Field
from typing import List, Literal, Optional
from datetime import datetime

ListingType = Literal["rent", "sale"]

class PropertyBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    title: str
    type: str
    price: int
    state: str
    city: str
    area_sq_ft: int = Field(alias="areaSqFt")
    bedrooms: int
    bathrooms: int
    amenities: List[str] = []
    furnished: str
    available_from: str = Field(alias="availableFrom")
    tags: List[str] = []
    listing_type: str = Field(alias="listingType")

class Property(PropertyBase):
    """Full property record, as served and as cached."""
    id: str
    listed_by: Optional[str] = Field(None, alias="listedBy")
    color_theme: Optional[str] = Field(None, alias="colorTheme")
    rating: float = 0.0
    is_verified: bool = Field(False, alias="isVerified")
    created_by: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ListingCreate(PropertyBase):
    """Schema for creating a listing owned by the current user."""
    listing_type: ListingType = Field(alias="listingType")

class ListingUpdate(BaseModel):
    """Schema for a partial listing update; unset fields are left alone."""
    model_config = ConfigDict(populate_by_name=True)

    title: Optional[str] = None
    type: Optional[str] = None
    price: Optional[int] = None
    state: Optional[str] = None
    city: Optional[str] = None
    area_sq_ft: Optional[int] = Field(None, alias="areaSqFt")
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    amenities: Optional[List[str]] = None
    furnished: Optional[str] = None
    available_from: Optional[str] = Field(None, alias="availableFrom")
    tags: Optional[List[str]] = None
    listing_type: Optional[ListingType] = Field(None, alias="listingType")

class PropertyFilter(BaseModel):
    """Query filters accepted by the property browse endpoint."""
    min_price: Optional[int] = None
    max_price: Optional[int] = None
    state: Optional[str] = None
    city: Optional[str] = None
    type: Optional[str] = None
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    verified: Optional[bool] = None
    furnished: Optional[str] = None
