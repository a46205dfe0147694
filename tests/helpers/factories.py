from typing import Any, Dict

from property_lister.core.database import utcnow
from property_lister.models.property import SYSTEM_OWNER

def property_record(id, created_by=SYSTEM_OWNER, created_at=None, **overrides) -> Dict[str, Any]:
    now = created_at or utcnow()
    data = {
        "id": id,
        "title": f"Property {id}",
        "type": "Apartment",
        "price": 100000,
        "state": "Karnataka",
        "city": "Bangalore",
        "area_sq_ft": 1200,
        "bedrooms": 2,
        "bathrooms": 2,
        "amenities": ["gym", "pool"],
        "furnished": "Furnished",
        "available_from": "2025-01-01",
        "listed_by": "Owner",
        "tags": ["family"],
        "color_theme": "#ffffff",
        "rating": 4.0,
        "is_verified": True,
        "listing_type": "rent",
        "created_by": created_by,
        "created_at": now,
        "updated_at": now,
    }
    data.update(overrides)
    return data
