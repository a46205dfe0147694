from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from property_lister.schemas.response import APIResponse
from property_lister.schemas.token import AuthData, LoginRequest
from property_lister.schemas.user import UserCreate
from property_lister.utils import deps
from property_lister.utils.service_registry import ServiceRegistry

router = APIRouter()

@router.post("/register", status_code=status.HTTP_201_CREATED, response_model=APIResponse[AuthData])
def register(
    user_in: UserCreate,
    db: Session = Depends(deps.get_db),
    services: ServiceRegistry = Depends(deps.get_services)
):
    """Create an account and return it with an access token."""
    data = services.auth.register(db, user_in=user_in)
    return APIResponse(message="User registered successfully", data=data)

@router.post("/login", response_model=APIResponse[AuthData])
async def login(
    request: LoginRequest,
    db: Session = Depends(deps.get_db),
    services: ServiceRegistry = Depends(deps.get_services)
):
    """Verify credentials, return a token and warm the user's cache in the background."""
    data = await services.auth.login(db, email=request.email, password=request.password)
    return APIResponse(message="Login successful", data=data)
