from dataclasses import dataclass

from fastapi import Header, HTTPException, status


@dataclass(frozen=True)
class CurrentUser:
    email: str


def get_current_user(
    x_user_email: str | None = Header(default=None),
) -> CurrentUser:
    """
    DEV AUTH: the identity provider sits in front of the API and forwards the
    signed-in user as the X-User-Email header.
    Example: X-User-Email: maker@local.test
    """
    if not x_user_email or not x_user_email.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Email header (dev auth)",
        )
    return CurrentUser(email=x_user_email.strip().lower())


def get_optional_user(
    x_user_email: str | None = Header(default=None),
) -> CurrentUser | None:
    if not x_user_email or not x_user_email.strip():
        return None
    return CurrentUser(email=x_user_email.strip().lower())
