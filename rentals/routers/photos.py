import hashlib
import logging
import os

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile

from .. import config, schemas
from ..deps import require_staff
from ..models import User

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["photos"])


@router.post("/upload", response_model=schemas.PhotoUploadOut)
def upload_photo(
    photo: UploadFile = File(...),
    _: User = Depends(require_staff),
):
    """
    Store an uploaded photo under a name derived from its content.

    The file is saved as ``<md5><ext>`` in the photos directory, so uploading
    the same image twice yields the same name. Attach the returned filename
    to a property's ``photos``.
    """
    content = photo.file.read(config.MAX_UPLOAD_BYTES + 1)
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")
    if len(content) > config.MAX_UPLOAD_BYTES:
        raise HTTPException(status_code=413, detail="File too large")

    md5 = hashlib.md5(content).hexdigest()
    ext = os.path.splitext(photo.filename or "")[1] or ".jpg"
    filename = f"{md5}{ext.lower()}"

    os.makedirs(config.PHOTOS_DIR, exist_ok=True)
    with open(os.path.join(config.PHOTOS_DIR, filename), "wb") as fh:
        fh.write(content)
    logger.info("Stored photo %s (%d bytes)", filename, len(content))
    return {"md5": md5, "filename": filename}
