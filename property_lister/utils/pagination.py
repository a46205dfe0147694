from dataclasses import dataclass

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 10
MAX_LIMIT = 100

@dataclass
class Pagination:
    page: int
    limit: int

def get_pagination(page: int = DEFAULT_PAGE, limit: int = DEFAULT_LIMIT) -> Pagination:
    """Clamp paging query parameters: page below 1 becomes 1, an out-of-range limit becomes 10."""
    if page < 1:
        page = DEFAULT_PAGE
    if limit < 1 or limit > MAX_LIMIT:
        limit = DEFAULT_LIMIT
    return Pagination(page=page, limit=limit)
