import hmac
import logging
from datetime import datetime, timedelta, timezone

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import jwt, JWTError
from passlib.context import CryptContext

from . import config, schemas
from .models import STAFF_ROLES, Document, User
from .store import DocumentStore

logger = logging.getLogger(__name__)


# ----- Store -----
_store = DocumentStore(config.DATA_FILE)


def get_store() -> DocumentStore:
    return _store


# ----- Auth / JWT -----
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# Match actual login endpoint: /users/login
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="users/login")


def verify_password(plain_password: str, stored_password: str) -> bool:
    """
    Check a password against a stored value.

    Records created through the API hold a bcrypt hash; records imported from
    older data files hold the plain password and are compared directly.
    """
    if not stored_password:
        return False
    if pwd_context.identify(stored_password):
        return pwd_context.verify(plain_password, stored_password)
    return hmac.compare_digest(plain_password.encode(), stored_password.encode())


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)


def authenticate_user(document: Document, email: str, password: str) -> User | None:
    user = document.find_user_by_email(email)
    if not user:
        return None
    if not verify_password(password, user.password):
        return None
    return user


def get_current_user(
    token: str = Depends(oauth2_scheme),
    store: DocumentStore = Depends(get_store),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
        token_data = schemas.TokenData(sub=payload.get("sub"), role=payload.get("role"))
        if token_data.sub is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = store.load().find_user(token_data.sub)
    if user is None:
        raise credentials_exception
    return user


def require_roles(*allowed_roles: str):
    """
    Usage: current_user: User = Depends(require_roles("admin", "normal"))
    """
    def role_checker(current_user: User = Depends(get_current_user)) -> User:
        if current_user.role not in allowed_roles:
            logger.warning("User %s (%s) denied, needs one of %s", current_user.id, current_user.role, allowed_roles)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Not enough permissions",
            )
        return current_user

    return role_checker


require_admin = require_roles("admin")
require_staff = require_roles(*STAFF_ROLES)
