from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.deps import (
    enforce_signup_rate_limit,
    enforce_read_rate_limit,
    get_signup_metadata,
    require_admin_token,
)
from app.schemas.waitlist import (
    WaitlistJoinRequest,
    WaitlistJoinResponse,
    SignupMetadata,
    WaitlistStatsResponse,
    ReferralStatsResponse,
    EntrantsListResponse,
    HealthResponse,
)
from app.services.waitlist_service import WaitlistService


router = APIRouter(prefix="/waitlist", tags=["waitlist"])


@router.get("/health", response_model=HealthResponse)
def health_check():
    return HealthResponse(service=settings.APP_NAME, version=settings.APP_VERSION)


@router.post(
    "/join",
    response_model=WaitlistJoinResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(enforce_signup_rate_limit)]
)
def join_waitlist(
    payload: WaitlistJoinRequest,
    metadata: SignupMetadata = Depends(get_signup_metadata),
    db: Session = Depends(get_db)
):
    """Add a signup to the waitlist and hand back its position and referral code."""
    entrant = WaitlistService(db).register(payload, metadata)
    return WaitlistJoinResponse(data=entrant.to_summary())


@router.get(
    "/stats",
    response_model=WaitlistStatsResponse,
    dependencies=[Depends(enforce_read_rate_limit)]
)
def get_waitlist_stats(db: Session = Depends(get_db)):
    return WaitlistStatsResponse(data=WaitlistService(db).get_stats())


@router.get(
    "/referral/{code}",
    response_model=ReferralStatsResponse,
    dependencies=[Depends(enforce_read_rate_limit)]
)
def get_referral_stats(code: str, db: Session = Depends(get_db)):
    return ReferralStatsResponse(data=WaitlistService(db).get_referral_stats(code))


@router.get(
    "/users",
    response_model=EntrantsListResponse,
    dependencies=[Depends(require_admin_token), Depends(enforce_read_rate_limit)]
)
def list_waitlist_users(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db)
):
    """Admin listing, newest signups first."""
    entrants, pagination = WaitlistService(db).list_entrants(page=page, limit=limit)
    return EntrantsListResponse(data={
        "users": [entrant.to_dict() for entrant in entrants],
        "pagination": pagination,
    })
