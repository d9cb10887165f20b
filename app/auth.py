"""Login, including the first-login flow that sets a pre-provisioned user's password."""

from app.errors import AuthError, ValidationError
from app.logging_config import get_logger
from app.repositories import UserRepository
from app.security import create_access_token, hash_password, verify_password

logger = get_logger(__name__)

PASSWORD_SET_MESSAGE = "Lozinka postavljena. Prijavite se ponovo."


async def login(users: UserRepository, username, password) -> dict:
    """
    Authenticate ``username`` and return the response body.

    A user whose stored password is NULL gets the supplied password hashed
    and saved; that call returns a message and no token, the next login with
    the same password returns a token.
    """
    if not username or not password or not isinstance(username, str) or not isinstance(password, str):
        raise ValidationError("Polja su obavezna")

    user = await users.get_by_username(username)
    if user is None:
        logger.info("login_failed", reason="unknown_user")
        raise AuthError("Pogrešno korisničko ime.")

    if not user.password:
        await users.set_password(user, hash_password(password))
        logger.info("password_initialized", user_id=user.id)
        return {"status": "success", "message": PASSWORD_SET_MESSAGE}

    if not verify_password(password, user.password):
        logger.info("login_failed", reason="bad_password", user_id=user.id)
        raise AuthError("Pogrešna lozinka.")

    token = create_access_token(user.id, user.username, user.isadmin)
    logger.info("login_succeeded", user_id=user.id)
    return {"status": "success", "token": token}
