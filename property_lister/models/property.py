from sqlalchemy import Boolean, Column, String, Integer, Float, DateTime, JSON
from property_lister.core.database import Base, utcnow

SYSTEM_OWNER = "SYSTEM"

class Property(Base):
    __tablename__ = "properties"

    id = Column(String, primary_key=True, index=True)  # e.g. PROP1000
    title = Column(String, nullable=False)
    type = Column(String, index=True)
    price = Column(Integer, index=True, default=0)
    state = Column(String, index=True)
    city = Column(String, index=True)
    area_sq_ft = Column(Integer, default=0)
    bedrooms = Column(Integer, default=0)
    bathrooms = Column(Integer, default=0)
    amenities = Column(JSON, default=list)
    furnished = Column(String)
    available_from = Column(String)
    listed_by = Column(String)
    tags = Column(JSON, default=list)
    color_theme = Column(String)
    rating = Column(Float, default=0.0)
    is_verified = Column(Boolean, default=False)
    listing_type = Column(String)  # rent, sale
    created_by = Column(String, index=True, nullable=False, default=SYSTEM_OWNER)

    created_at = Column(DateTime(timezone=True), default=utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)
