from app.models import User
from app.models.enums import UserRole
from flask_jwt_extended import create_access_token
from app.exceptions import AuthenticationError, ValidationError
from app.repositories import UserRepository
from app.utils.identity import build_claims
from app.utils.validation import parse_email, parse_enum, parse_string, require_fields
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def issue_token(user):
    return create_access_token(identity=str(user.id), additional_claims=build_claims(user))


class UserService:
    @staticmethod
    def sign_up(user_data):
        require_fields(user_data, ["name", "email", "password"])
        email = parse_email(user_data["email"])
        password = parse_string(user_data["password"], "password")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(
                {"password": [f"The password must be at least {MIN_PASSWORD_LENGTH} characters."]}
            )
        # Unknown roles are rejected, not coerced; admins are created with create_admin.py
        role = parse_enum(user_data.get("role", UserRole.PARTICIPANT.value), UserRole, "role")
        if role != UserRole.PARTICIPANT:
            logger.warning(f"Signup attempt requesting role {role.value}: {email}")
            raise ValidationError({"role": ["Only participant accounts can be created through sign-up."]})

        if UserRepository.find_by_email(email):
            logger.warning(f"Signup attempt with existing email: {email}")
            raise ValidationError({"email": ["The email has already been taken."]})

        user = User(
            name=parse_string(user_data["name"], "name", max_length=255, allow_empty=False),
            email=email,
            role=role,
            organization=parse_string(user_data.get("organization"), "organization", max_length=255),
            phone=parse_string(user_data.get("phone"), "phone", max_length=20),
        )
        user.set_password(password)
        created_user = UserRepository.sign_up(user)

        logger.info(f"User created successfully: {created_user.email}")
        return {"token": issue_token(created_user), "user": created_user.to_dict()}

    @staticmethod
    def sign_in(email, password):
        user = UserRepository.find_by_email(email) if isinstance(email, str) else None
        if not user or not isinstance(password, str) or not user.check_password(password):
            logger.warning(f"Failed login attempt for: {email}")
            raise AuthenticationError()

        logger.info(f"User logged in successfully: {email}")
        return {"token": issue_token(user), "user": user.to_dict()}

    @staticmethod
    def get_user(identity):
        user = UserRepository.find_by_id(identity.user_id)
        if not user:
            raise AuthenticationError("User not found")
        return user
