from typing import Optional, List, Tuple, Dict
from sqlalchemy import func
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from app.models.entrant import WaitlistEntrant, Interest
import uuid


class EntrantRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[WaitlistEntrant]:
        return self.db.query(WaitlistEntrant).filter(
            WaitlistEntrant.email == email.strip().lower()
        ).first()

    def get_by_referral_code(self, code: str) -> Optional[WaitlistEntrant]:
        return self.db.query(WaitlistEntrant).filter(
            WaitlistEntrant.referral_code == code.strip().upper()
        ).first()

    def referral_code_exists(self, code: str) -> bool:
        return self.db.query(
            self.db.query(WaitlistEntrant).filter(WaitlistEntrant.referral_code == code).exists()
        ).scalar()

    def count(self) -> int:
        return self.db.query(WaitlistEntrant).count()

    def count_early_access(self) -> int:
        return self.db.query(WaitlistEntrant).filter(
            WaitlistEntrant.early_access == True
        ).count()

    def count_referrals(self, code: str) -> int:
        return self.db.query(WaitlistEntrant).filter(
            WaitlistEntrant.referred_by == code
        ).count()

    def interest_breakdown(self) -> Dict[str, int]:
        rows = self.db.query(
            WaitlistEntrant.interest,
            func.count(WaitlistEntrant.id)
        ).group_by(WaitlistEntrant.interest).all()
        return {interest.value: total for interest, total in rows}

    def list_page(self, page: int = 1, limit: int = 50) -> Tuple[List[WaitlistEntrant], int]:
        query = self.db.query(WaitlistEntrant)

        total_count = query.count()

        offset = (page - 1) * limit
        entrants = query.order_by(
            WaitlistEntrant.created_at.desc(),
            WaitlistEntrant.waitlist_position.desc()
        ).offset(offset).limit(limit).all()

        return entrants, total_count

    def create(
        self,
        name: str,
        email: str,
        referral_code: str,
        waitlist_position: int,
        early_access: bool,
        interest: Interest = Interest.ALL,
        phone: Optional[str] = None,
        referred_by: Optional[str] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        signup_source: str = "website"
    ) -> WaitlistEntrant:
        entrant_id = str(uuid.uuid4())

        entrant = WaitlistEntrant(
            id=entrant_id,
            name=name,
            email=email.strip().lower(),
            phone=phone,
            interest=interest,
            referral_code=referral_code,
            referred_by=referred_by,
            waitlist_position=waitlist_position,
            early_access=early_access,
            ip_address=ip_address,
            user_agent=user_agent,
            signup_source=signup_source
        )

        try:
            self.db.add(entrant)
            self.db.commit()
            self.db.refresh(entrant)
            return entrant
        except IntegrityError:
            self.db.rollback()
            raise
