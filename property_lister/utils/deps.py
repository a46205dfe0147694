from typing import Iterator
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from property_lister.core.security import decode_access_token
from property_lister.schemas.token import TokenPayload
from property_lister.schemas.user import AuthContext
from property_lister.utils.service_registry import ServiceRegistry

http_bearer = HTTPBearer(auto_error=False)

def get_services(request: Request) -> ServiceRegistry:
    return request.app.state.services

def get_db(services: ServiceRegistry = Depends(get_services)) -> Iterator[Session]:
    db = services.session_factory()
    try:
        yield db
    finally:
        db.close()

def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(http_bearer)
) -> AuthContext:
    if credentials is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Authorization header is required")
    try:
        payload = decode_access_token(credentials.credentials)
        token_data = TokenPayload(**payload)
    except JWTError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")
    except ValidationError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")

    if not token_data.user_id or not token_data.email:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token claims")
    return AuthContext(user_id=token_data.user_id, email=token_data.email)
