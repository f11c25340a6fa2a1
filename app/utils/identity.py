from dataclasses import dataclass
from typing import Optional
from flask import current_app
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request
from app.exceptions import AuthenticationError
from app.models.enums import UserRole


@dataclass(frozen=True)
class RequestIdentity:
    """The verified caller of a single request, passed explicitly into services."""

    user_id: int
    role: UserRole

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


def build_claims(user):
    return {"role": user.role.value}


def get_request_identity(optional: bool = False) -> Optional[RequestIdentity]:
    """Resolve the identity from the bearer token of the current request.

    With ``optional=True`` an absent token yields ``None``; an invalid token
    still raises and is answered by the JWT error handlers, and a token whose
    role claim is not a known role is rejected with 401.
    """
    verify_jwt_in_request(optional=optional)
    user_id = get_jwt_identity()
    if user_id is None:
        return None
    claims = get_jwt()
    try:
        role = UserRole(claims.get("role"))
    except ValueError:
        current_app.logger.warning(f"Token for user {user_id} carries an unknown role claim")
        raise AuthenticationError("Invalid token")
    return RequestIdentity(user_id=int(user_id), role=role)
