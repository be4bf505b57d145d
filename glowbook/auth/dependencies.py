import jwt
from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from glowbook.auth import jwt_handler
from glowbook.database import SessionLocal
from glowbook.models.user import User

security = HTTPBearer()


def load_user_by_email(email: str) -> User | None:
    db = SessionLocal()
    try:
        return db.query(User).filter(User.email == email).first()
    finally:
        db.close()


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> User:
    try:
        email = jwt_handler.get_token_subject(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        raise HTTPException(status_code=401, detail="Invalid token") from exc

    if not email:
        raise HTTPException(status_code=401, detail="Invalid token subject")

    user = load_user_by_email(email)
    if user is None:
        raise HTTPException(status_code=401, detail="User not found")
    return user


def get_current_specialist(current_user: User = Depends(get_current_user)) -> User:
    if not current_user.is_specialist:
        raise HTTPException(status_code=403, detail="Only specialists can manage availability.")
    return current_user
