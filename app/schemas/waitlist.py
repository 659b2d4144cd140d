from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List, Dict, Any
import re
from app.models.entrant import Interest

PHONE_PATTERN = re.compile(r"^\+?[\d\s\-().]+$")


class WaitlistJoinRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=50)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=30)
    interest: Interest = Interest.ALL
    referralCode: Optional[str] = Field(None, max_length=20)

    @validator('name', pre=True)
    def strip_name(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    @validator('email')
    def lowercase_email(cls, v):
        return v.lower()

    @validator('phone')
    def validate_phone(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            return None
        digits = re.sub(r"\D", "", v)
        if not PHONE_PATTERN.match(v) or not 7 <= len(digits) <= 15:
            raise ValueError('Please include a valid phone number')
        return v

    @validator('interest', pre=True)
    def default_interest(cls, v):
        if v is None or v == "":
            return Interest.ALL
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @validator('referralCode')
    def normalize_referral_code(cls, v):
        if v is None:
            return v
        v = v.strip().upper()
        return v or None


class SignupMetadata(BaseModel):
    ipAddress: Optional[str] = None
    userAgent: Optional[str] = None
    signupSource: str = "website"


class EntrantSummary(BaseModel):
    id: str
    name: str
    email: str
    waitlistPosition: int
    earlyAccess: bool
    referralCode: str
    joinDate: Optional[str] = None


class WaitlistJoinResponse(BaseModel):
    success: bool = True
    message: str = "Successfully joined waitlist!"
    data: EntrantSummary


class WaitlistStats(BaseModel):
    totalUsers: int
    earlyAccessUsers: int
    earlyAccessSpotsLeft: int
    interestStats: Dict[str, int]


class WaitlistStatsResponse(BaseModel):
    success: bool = True
    data: WaitlistStats


class ReferralStats(BaseModel):
    referrerName: str
    referralCode: str
    referralCount: int
    rewardsEligible: bool


class ReferralStatsResponse(BaseModel):
    success: bool = True
    data: ReferralStats


class EntrantResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    interest: str
    referralCode: str
    referredBy: Optional[str] = None
    waitlistPosition: int
    earlyAccess: bool
    emailVerified: bool
    subscription: str
    signupSource: str
    createdAt: Optional[str] = None

    class Config:
        from_attributes = True


class PaginationInfo(BaseModel):
    current: int
    pages: int
    total: int


class EntrantsPage(BaseModel):
    users: List[EntrantResponse]
    pagination: PaginationInfo


class EntrantsListResponse(BaseModel):
    success: bool = True
    data: EntrantsPage


class HealthResponse(BaseModel):
    status: str = "healthy"
    service: str
    version: str


def format_validation_errors(errors: List[Dict[str, Any]]) -> List[dict]:
    """
    Flatten pydantic error dicts into ``{"field": ..., "message": ...}`` items.

    The ``body``/``query``/``path`` location prefix FastAPI adds is dropped so
    the same shape comes back whether the request or the service validated.
    """
    formatted = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path")]
        message = error.get("msg", "Invalid value")
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
        formatted.append({
            "field": ".".join(loc) or None,
            "message": message,
        })
    return formatted
