from typing import List, Optional

from fastapi import APIRouter, Depends

from .. import schemas
from ..audit import filter_logs, format_log_message
from ..deps import get_store, require_admin
from ..models import User
from ..store import DocumentStore

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("/", response_model=List[schemas.LogOut])
def list_logs(
    entity_type: Optional[str] = None,
    search: Optional[str] = None,
    limit: Optional[int] = None,
    store: DocumentStore = Depends(get_store),
    _: User = Depends(require_admin),
):
    """
    Audit trail, newest first. *(Admin only)*

    Parameters
    ----------
    entity_type : str, optional
        ``booking``, ``property``, ``group`` or ``user``.
    search : str, optional
        Matches the action and the old/new values.
    """
    document = store.load()
    emails = {u.id: u.email for u in document.users}
    entries = filter_logs(document.logs, entity_type, search)
    if limit is not None:
        entries = entries[:limit]
    return [
        schemas.LogOut(
            **e.to_dict(),
            user_email=emails.get(e.user_id),
            message=format_log_message(e.action, e.entity_type, e.old_value, e.new_value),
        )
        for e in entries
    ]
