from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from ..deps import get_store, require_admin
from ..models import User
from ..store import DocumentStore

router = APIRouter(prefix="/data", tags=["data"])


@router.get("/")
def export_document(
    store: DocumentStore = Depends(get_store),
    _: User = Depends(require_admin),
):
    """
    Export the whole data document. *(Admin only)*

    Passwords are left out.
    """
    raw = store.load().to_dict()
    for user in raw["users"]:
        user.pop("password", None)
    return raw


@router.post("/")
def import_document(
    payload: Dict[str, Any] = Body(...),
    store: DocumentStore = Depends(get_store),
    _: User = Depends(require_admin),
):
    """
    Replace the whole data document. *(Admin only)*

    ``users``, ``groups`` and ``apartments`` must be arrays; ``logs`` and
    ``user_groups`` default to empty. Booking dates must parse, otherwise
    nothing is written.

    Raises
    ------
    HTTPException
        - 400 if the document is malformed.
    """
    document = store.replace(payload)
    return {"success": True, "tables": document.table_counts()}
