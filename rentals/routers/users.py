import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from .. import commands, schemas, views
from ..deps import (
    authenticate_user,
    create_access_token,
    get_current_user,
    get_password_hash,
    get_store,
    require_admin,
)
from ..models import User
from ..store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.post("/login", response_model=schemas.Token, tags=["auth"])
def login_for_access_token(
    credentials: schemas.LoginRequest,
    store: DocumentStore = Depends(get_store),
):
    """
    Authenticate a user and return a JWT access token.

    The token carries the user id and role. The user profile is returned
    alongside it, without the password.

    Raises
    ------
    HTTPException
        - 401 if the email or password is wrong.
    """
    document = store.load()
    user = authenticate_user(document, credentials.email, credentials.password)
    if not user:
        logger.warning("Failed login for %s", credentials.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    token = create_access_token({"sub": user.id, "role": user.role})
    return {"access_token": token, "token_type": "bearer", "user": views.user_out(document, user)}


@router.get("/me", response_model=schemas.UserOut)
def read_current_user(
    current_user: User = Depends(get_current_user),
    store: DocumentStore = Depends(get_store),
):
    """
    Get the currently authenticated user.
    """
    return views.user_out(store.load(), current_user)


@router.get("/", response_model=List[schemas.UserOut])
def list_users(
    store: DocumentStore = Depends(get_store),
    _: User = Depends(require_admin),
):
    """
    List all users. *(Admin only)*
    """
    document = store.load()
    return [views.user_out(document, u) for u in document.users]


@router.post("/", response_model=schemas.UserOut)
def create_user(
    user_in: schemas.UserCreate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    Create a user. *(Admin only)*

    The password is stored hashed. ``group_ids`` sets group membership and
    is only kept for customers.

    Raises
    ------
    HTTPException
        - 400 if the email already exists.
        - 404 if a group id does not exist.
    """
    with store.transaction() as document:
        user = commands.create_user(
            document,
            current_user,
            email=user_in.email,
            password=get_password_hash(user_in.password),
            role=user_in.role,
            name=user_in.name,
            group_ids=user_in.group_ids,
        )
        return views.user_out(document, user)


@router.patch("/{user_id}", response_model=schemas.UserOut)
def update_user(
    user_id: str,
    user_update: schemas.UserUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    Update a user. *(Admin only)*

    Changing the email also moves any property assigned directly to the old
    address over to the new one.
    """
    changes = user_update.model_dump(exclude_unset=True)
    if changes.get("password"):
        changes["password"] = get_password_hash(changes["password"])
    with store.transaction() as document:
        user = commands.update_user(document, current_user, user_id, changes)
        return views.user_out(document, user)


@router.delete("/{user_id}")
def delete_user(
    user_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    Delete a user. *(Admin only)*

    The user's bookings are removed from every property.
    """
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    with store.transaction() as document:
        commands.delete_user(document, current_user, user_id)
    return {"detail": "User deleted"}
