from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from property_lister.schemas.recommendation import Recommendation, RecommendationCreate
from property_lister.schemas.response import APIResponse
from property_lister.schemas.user import AuthContext
from property_lister.utils import deps
from property_lister.utils.service_registry import ServiceRegistry

router = APIRouter()

@router.post("/send", response_model=APIResponse[Recommendation])
async def send_recommendation(
    recommendation_in: RecommendationCreate,
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    """Recommend a property to another registered user."""
    data = await services.recommendations.send(db, sender=user, recommendation_in=recommendation_in)
    return APIResponse(message="Recommendation sent successfully", data=data)

@router.get("/", response_model=APIResponse[List[Recommendation]])
async def get_my_recommendations(
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    data = await services.recommendations.get_all(db, user=user)
    return APIResponse(message="Recommendations fetched successfully", data=data)

@router.get("/sent", response_model=APIResponse[List[Recommendation]])
async def get_sent_recommendations(
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    data = await services.recommendations.get_sent(db, user=user)
    return APIResponse(message="Sent recommendations fetched successfully", data=data)

@router.get("/received", response_model=APIResponse[List[Recommendation]])
async def get_received_recommendations(
    db: Session = Depends(deps.get_db),
    user: AuthContext = Depends(deps.get_current_user),
    services: ServiceRegistry = Depends(deps.get_services)
):
    data = await services.recommendations.get_received(db, user=user)
    return APIResponse(message="Received recommendations fetched successfully", data=data)
