from datetime import date
from email_validator import validate_email, EmailNotValidError
from app.exceptions import MissingFieldsError, ValidationError
from app.utils.dates import parse_datetime

TRUE_VALUES = {"true", "1", "t", "yes", "on"}
FALSE_VALUES = {"false", "0", "f", "no", "off", ""}


def require_object(data):
    if not isinstance(data, dict):
        raise ValidationError(message="The request body must be a JSON object.")


def require_fields(data, fields):
    require_object(data)
    missing = [f for f in fields if data.get(f) in (None, "")]
    if missing:
        raise MissingFieldsError(missing)


def parse_int(value, field, minimum=None):
    if isinstance(value, bool):
        raise ValidationError({field: [f"The {field} field must be an integer."]})
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError({field: [f"The {field} field must be an integer."]})
    if isinstance(value, float) and value != number:
        raise ValidationError({field: [f"The {field} field must be an integer."]})
    if minimum is not None and number < minimum:
        raise ValidationError({field: [f"The {field} field must be at least {minimum}."]})
    return number


def parse_bool(value, field):
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in TRUE_VALUES:
            return True
        if lowered in FALSE_VALUES:
            return False
    raise ValidationError({field: [f"The {field} field must be true or false."]})


def parse_string(value, field, max_length=None, allow_empty=True):
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError({field: [f"The {field} field must be a string."]})
    if not allow_empty and not value.strip():
        raise MissingFieldsError([field])
    if max_length is not None and len(value) > max_length:
        raise ValidationError(
            {field: [f"The {field} field may not be greater than {max_length} characters."]}
        )
    return value


def parse_date_field(value, field):
    try:
        return parse_datetime(value)
    except ValueError:
        raise ValidationError({field: [f"The {field} field is not a valid date."]})


def parse_day(value, field):
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        raise ValidationError({field: [f"The {field} field must be a date in YYYY-MM-DD format."]})


def parse_enum(value, enum_cls, field):
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise ValidationError(
            {field: [f"The selected {field} is invalid. Allowed values: {', '.join(allowed)}."]}
        )
    return enum_cls(value)


def parse_email(value, field="email"):
    if not isinstance(value, str) or len(value) > 255:
        raise ValidationError({field: [f"The {field} field must be a valid email address."]})
    try:
        return validate_email(value.strip(), check_deliverability=False).normalized
    except EmailNotValidError as e:
        raise ValidationError({field: [str(e)]})


def parse_email_list(value, field, max_items):
    """Validate a list of distinct email addresses.

    Returns the normalized addresses in input order. Duplicates are compared
    case-insensitively.
    """
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValidationError({field: [f"The {field} field must be an array."]})
    if len(value) > max_items:
        raise ValidationError(
            {field: [f"The {field} field may not have more than {max_items} items."]}
        )

    errors = {}
    emails = []
    seen = set()
    for index, item in enumerate(value):
        key = f"{field}.{index}"
        try:
            email = parse_email(item, key)
        except ValidationError as e:
            errors.update(e.errors)
            continue
        if email.lower() in seen:
            errors[key] = [f"The {key} field has a duplicate value."]
            continue
        seen.add(email.lower())
        emails.append(email)

    if errors:
        raise ValidationError(errors)
    return emails
