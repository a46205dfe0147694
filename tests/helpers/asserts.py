import asyncio
from typing import Any, Dict, Optional
from fastapi.testclient import TestClient

from property_lister.core.cache import CacheMiss, CacheStore

def auth_headers(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}

def api_call(client: TestClient, method: str, path: str, token: Optional[str] = None, json: Optional[Dict[str, Any]] = None, expected_min: int = 200, expected_max: int = 300):
    headers = auth_headers(token) if token else None
    response = client.request(method, path, headers=headers, json=json)
    ok = expected_min <= response.status_code < expected_max
    try:
        body = response.json()
    except Exception:
        body = response.text
    assert ok, f"{method} {path} => {response.status_code}, body={body}, json={json}"
    return response

def cached(cache: CacheStore, key: str, shape: Any = None) -> Any:
    """Read a key from a memory-backed store outside the app's event loop; None on a miss."""
    try:
        return asyncio.run(cache.get(key, shape))
    except CacheMiss:
        return None
