from fastapi import APIRouter, Depends, HTTPException

from .. import config, schemas
from ..availability import compute_availability
from ..deps import get_store
from ..store import DocumentStore

router = APIRouter(prefix="/public", tags=["public"])


@router.get("/properties/{ids}", response_model=schemas.PublicPropertiesOut)
def share_properties(ids: str, store: DocumentStore = Depends(get_store)):
    """
    Read-only view of selected properties for prospective guests.

    ``ids`` is a comma-separated list of property ids. No authentication is
    required; bookings are reduced to date ranges and an availability map
    for the next days is included. Unknown ids are skipped.
    """
    wanted = [i.strip() for i in ids.split(",") if i.strip()]
    if not wanted:
        raise HTTPException(status_code=400, detail="No property IDs provided")

    document = store.load()
    properties = []
    for apartment in document.apartments:
        if apartment.id not in wanted:
            continue
        properties.append(
            schemas.PublicPropertyOut(
                id=apartment.id,
                name=apartment.name,
                address=apartment.address,
                extra_info=apartment.extra_info,
                roi_info=apartment.roi_info,
                photos=apartment.photos,
                bookings=[
                    schemas.PublicBookingOut(start_date=b.start_date, end_date=b.end_date)
                    for b in apartment.bookings
                ],
                availability=compute_availability(
                    apartment.bookings, window_days=config.AVAILABILITY_WINDOW_DAYS
                ),
            )
        )
    return {"properties": properties}
