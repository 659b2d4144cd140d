from sqlalchemy import Column, String, DateTime, Integer, Boolean, Enum as SQLEnum
from sqlalchemy.sql import func
import enum
from app.core.database import Base

MAX_IP_ADDRESS_LENGTH = 45
MAX_USER_AGENT_LENGTH = 512


class Interest(str, enum.Enum):
    SHOPPING = "shopping"
    FOOD = "food"
    PAYMENTS = "payments"
    ALL = "all"


class Subscription(str, enum.Enum):
    FREE = "free"
    PREMIUM = "premium"


class WaitlistEntrant(Base):
    """
    A person who signed up on the landing page.

    Rows are append-only. Email, referral code and waitlist position are each
    unique so that concurrent signups cannot share a position or a code.
    """
    __tablename__ = "waitlist_entrants"

    id = Column(String(36), primary_key=True, index=True)

    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    phone = Column(String(30), nullable=True)

    interest = Column(
        SQLEnum(Interest),
        nullable=False,
        default=Interest.ALL,
        index=True
    )

    referral_code = Column(String(9), nullable=False, unique=True, index=True)
    referred_by = Column(
        String(9),
        nullable=True,
        index=True,
        comment="Referral code of the entrant who invited this one"
    )

    waitlist_position = Column(
        Integer,
        nullable=False,
        unique=True,
        index=True,
        comment="1-based signup order (lower number = joined earlier)"
    )
    early_access = Column(Boolean, nullable=False, default=False, index=True)

    email_verified = Column(Boolean, nullable=False, default=False)
    subscription = Column(
        SQLEnum(Subscription),
        nullable=False,
        default=Subscription.FREE
    )

    ip_address = Column(String(MAX_IP_ADDRESS_LENGTH), nullable=True)
    user_agent = Column(String(MAX_USER_AGENT_LENGTH), nullable=True)
    signup_source = Column(String(50), nullable=False, default="website")

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<WaitlistEntrant(id={self.id}, email={self.email}, position={self.waitlist_position})>"

    def to_summary(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "waitlistPosition": self.waitlist_position,
            "earlyAccess": self.early_access,
            "referralCode": self.referral_code,
            "joinDate": self.created_at.isoformat() if self.created_at else None,
        }

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "interest": self.interest.value,
            "referralCode": self.referral_code,
            "referredBy": self.referred_by,
            "waitlistPosition": self.waitlist_position,
            "earlyAccess": self.early_access,
            "emailVerified": self.email_verified,
            "subscription": self.subscription.value,
            "signupSource": self.signup_source,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
