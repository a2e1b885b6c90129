from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from .. import commands, schemas, views
from ..dates import today_utc
from ..deps import get_store, require_admin
from ..models import User
from ..store import DocumentStore
from ..visibility import properties_in_group

router = APIRouter(prefix="/groups", tags=["groups"])


@router.get("/", response_model=List[schemas.GroupOut])
def list_groups(
    store: DocumentStore = Depends(get_store),
    _: User = Depends(require_admin),
):
    """
    List all groups. *(Admin only)*
    """
    return store.load().groups


@router.post("/", response_model=schemas.GroupOut)
def create_group(
    group_in: schemas.GroupCreate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    Create a group. *(Admin only)*

    Raises
    ------
    HTTPException
        - 400 if the name is taken or contains ``@``.
    """
    with store.transaction() as document:
        return commands.create_group(document, current_user, group_in.name)


@router.patch("/{group_id}", response_model=schemas.GroupOut)
def rename_group(
    group_id: str,
    group_update: schemas.GroupUpdate,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    Rename a group. *(Admin only)*

    Properties tagged with the old name are re-tagged with the new one.
    """
    with store.transaction() as document:
        return commands.rename_group(document, current_user, group_id, group_update.name)


@router.delete("/{group_id}")
def delete_group(
    group_id: str,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    Delete a group. *(Admin only)*

    The group's tag is removed from every property and its members lose the
    membership.
    """
    with store.transaction() as document:
        commands.delete_group(document, current_user, group_id)
    return {"detail": "Group deleted"}


@router.get("/{group_id}/properties", response_model=List[schemas.PropertyOut])
def list_group_properties(
    group_id: str,
    as_of: Optional[date] = None,
    store: DocumentStore = Depends(get_store),
    current_user: User = Depends(require_admin),
):
    """
    List the properties tagged with a group. *(Admin only)*
    """
    document = store.load()
    group = document.find_group(group_id)
    if group is None:
        raise HTTPException(status_code=404, detail="Group not found")
    day = as_of or today_utc()
    return [views.property_out(current_user, a, day) for a in properties_in_group(document, group.name)]
