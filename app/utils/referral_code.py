import re
import secrets
import string

REFERRAL_CODE_PREFIX = "ONE"
REFERRAL_CODE_LENGTH = 6
REFERRAL_CODE_ALPHABET = string.ascii_uppercase + string.digits
REFERRAL_CODE_PATTERN = re.compile(r"^ONE[A-Z0-9]{6}$")


def generate_referral_code() -> str:
    suffix = "".join(
        secrets.choice(REFERRAL_CODE_ALPHABET) for _ in range(REFERRAL_CODE_LENGTH)
    )
    return f"{REFERRAL_CODE_PREFIX}{suffix}"


def normalize_referral_code(code: str) -> str:
    return code.strip().upper()


def is_valid_referral_code(code: str) -> bool:
    return bool(REFERRAL_CODE_PATTERN.match(code))
