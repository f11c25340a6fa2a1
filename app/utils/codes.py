import secrets
import string

REGISTRATION_CODE_LENGTH = 8
REGISTRATION_CODE_ALPHABET = string.ascii_uppercase + string.digits


def generate_registration_code(length: int = REGISTRATION_CODE_LENGTH) -> str:
    """Return a random code of uppercase letters and digits, e.g. ``"K7Q2M9XA"``."""
    return "".join(secrets.choice(REGISTRATION_CODE_ALPHABET) for _ in range(length))


def normalize_registration_code(code: str) -> str:
    return code.strip().upper()
