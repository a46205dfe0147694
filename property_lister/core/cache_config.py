"""Cache key space and TTL settings for user-scoped projections"""

# Cache TTL (Time To Live) in seconds; every projection shares one lifetime
CACHE_TTL = 600  # 10 minutes

# Key prefixes
USER_FAVORITES = "user_favorites"
USER_FAVORITE_PROPERTIES = "user_favorite_properties"
USER_LISTINGS = "user_listings"
USER_RECOMMENDATIONS = "user_recommendations"

SENT = "sent"
RECEIVED = "received"


def build_key(prefix: str, subject_id: str, suffix: str = "") -> str:
    """Build ``prefix:subject`` or ``prefix:subject:suffix``.

    Nothing is escaped: a subject or suffix containing ``:`` can collide
    with another key.
    """
    if suffix:
        return f"{prefix}:{subject_id}:{suffix}"
    return f"{prefix}:{subject_id}"


def user_invalidation_patterns(user_id: str) -> list:
    return [f"*:{user_id}:*", f"*:{user_id}"]
