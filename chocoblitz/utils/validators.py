class FormError(ValueError):
    """Client-side form validation failure, shown inline next to the form."""


def require_fields(*values: str) -> None:
    if any(not (v or "").strip() for v in values):
        raise FormError("Please fill in all fields")


def validate_login(email: str, password: str) -> None:
    require_fields(email, password)


def validate_signup(
    name: str,
    email: str,
    password: str,
    confirm_password: str,
    agree_terms: bool,
    min_length: int = 8,
) -> None:
    require_fields(name, email, password, confirm_password)
    if password != confirm_password:
        raise FormError("Passwords do not match")
    if len(password) < min_length:
        raise FormError(f"Password must be at least {min_length} characters")
    if not agree_terms:
        raise FormError("Please agree to Terms & Conditions")


def validate_rating(rating: int) -> int:
    try:
        rating = int(rating)
    except (TypeError, ValueError):
        raise FormError("Rating must be a number")
    if not 1 <= rating <= 5:
        raise FormError("Rating must be between 1 and 5")
    return rating
