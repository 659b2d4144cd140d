from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from pydantic import ValidationError as PydanticValidationError
from typing import Optional, Tuple, List, Union
import logging
import math

from app.core.config import settings
from app.core.exceptions import (
    ValidationError,
    DuplicateEmailError,
    InvalidReferralCodeError,
    NotFoundError,
    ReferralCodeExhaustedError,
    StorageError,
)
from app.models.entrant import WaitlistEntrant
from app.repositories.entrant_repository import EntrantRepository
from app.schemas.waitlist import WaitlistJoinRequest, SignupMetadata, format_validation_errors
from app.utils.audit import audit
from app.utils.referral_code import generate_referral_code, normalize_referral_code

logger = logging.getLogger(__name__)


class WaitlistService:

    def __init__(self, db: Session):
        self.db = db
        self.entrant_repo = EntrantRepository(db)

    def register(
        self,
        signup_data: Union[WaitlistJoinRequest, dict],
        metadata: Optional[SignupMetadata] = None
    ) -> WaitlistEntrant:
        if not isinstance(signup_data, WaitlistJoinRequest):
            try:
                signup_data = WaitlistJoinRequest(**signup_data)
            except PydanticValidationError as e:
                raise ValidationError(format_validation_errors(e.errors()))

        metadata = metadata or SignupMetadata()

        if self.entrant_repo.get_by_email(signup_data.email):
            raise DuplicateEmailError()

        referred_by = None
        if signup_data.referralCode:
            referrer = self.entrant_repo.get_by_referral_code(signup_data.referralCode)
            if not referrer:
                raise InvalidReferralCodeError(signup_data.referralCode)
            referred_by = referrer.referral_code

        # Position and code are only claimed once the insert commits; a unique
        # violation means another signup took one of them, so start over.
        for attempt in range(1, settings.REGISTRATION_MAX_ATTEMPTS + 1):
            position = self.entrant_repo.count() + 1
            referral_code = self._generate_unique_referral_code()

            try:
                entrant = self.entrant_repo.create(
                    name=signup_data.name,
                    email=signup_data.email,
                    phone=signup_data.phone,
                    interest=signup_data.interest,
                    referral_code=referral_code,
                    referred_by=referred_by,
                    waitlist_position=position,
                    early_access=position <= settings.EARLY_ACCESS_LIMIT,
                    ip_address=metadata.ipAddress,
                    user_agent=metadata.userAgent,
                    signup_source=metadata.signupSource
                )
            except IntegrityError:
                if self.entrant_repo.get_by_email(signup_data.email):
                    raise DuplicateEmailError()
                logger.info(
                    f"Signup conflict on position {position} or code {referral_code} "
                    f"(attempt {attempt}), retrying"
                )
                continue

            audit(
                "waitlist.joined",
                email=entrant.email,
                entrant_id=entrant.id,
                position=entrant.waitlist_position,
                early_access=entrant.early_access,
                referred_by=entrant.referred_by,
                ip=metadata.ipAddress
            )
            logger.info(f"Entrant {entrant.id} joined waitlist at position {entrant.waitlist_position}")
            return entrant

        logger.error(
            f"Could not assign a waitlist position after {settings.REGISTRATION_MAX_ATTEMPTS} attempts"
        )
        raise StorageError("Could not assign a waitlist position. Please try again.")

    def _generate_unique_referral_code(self) -> str:
        max_attempts = settings.REFERRAL_CODE_MAX_ATTEMPTS
        for _ in range(max_attempts):
            code = generate_referral_code()
            if not self.entrant_repo.referral_code_exists(code):
                return code

        logger.error(f"No unused referral code found after {max_attempts} attempts")
        raise ReferralCodeExhaustedError(max_attempts)

    def get_stats(self) -> dict:
        try:
            total = self.entrant_repo.count()
            early_access = self.entrant_repo.count_early_access()
            breakdown = self.entrant_repo.interest_breakdown()
        except SQLAlchemyError as e:
            logger.error(f"Failed to load waitlist stats: {str(e)}")
            raise StorageError("Error fetching waitlist statistics")

        return {
            "totalUsers": total,
            "earlyAccessUsers": early_access,
            "earlyAccessSpotsLeft": max(0, settings.EARLY_ACCESS_LIMIT - early_access),
            "interestStats": breakdown,
        }

    def get_referral_stats(self, code: str) -> dict:
        code = normalize_referral_code(code)
        referrer = self.entrant_repo.get_by_referral_code(code)
        if not referrer:
            raise NotFoundError("Invalid referral code")

        referral_count = self.entrant_repo.count_referrals(referrer.referral_code)

        return {
            "referrerName": referrer.name,
            "referralCode": referrer.referral_code,
            "referralCount": referral_count,
            "rewardsEligible": referral_count >= settings.REFERRAL_REWARD_THRESHOLD,
        }

    def list_entrants(
        self,
        page: int = 1,
        limit: Optional[int] = None
    ) -> Tuple[List[WaitlistEntrant], dict]:
        if limit is None:
            limit = settings.DEFAULT_PAGE_SIZE

        if page < 1:
            raise ValidationError([{"field": "page", "message": "Page number must be at least 1"}])

        if limit < 1 or limit > settings.MAX_PAGE_SIZE:
            raise ValidationError([{
                "field": "limit",
                "message": f"Limit must be between 1 and {settings.MAX_PAGE_SIZE}"
            }])

        try:
            entrants, total = self.entrant_repo.list_page(page=page, limit=limit)
        except SQLAlchemyError as e:
            logger.error(f"Failed to list waitlist entrants: {str(e)}")
            raise StorageError("Error fetching users")

        pagination = {
            "current": page,
            "pages": math.ceil(total / limit) if total else 0,
            "total": total,
        }
        return entrants, pagination
