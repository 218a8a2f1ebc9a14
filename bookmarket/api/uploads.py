# bookmarket/api/uploads.py
from typing import List

from fastapi import APIRouter, Depends, File, UploadFile

from ..exceptions import ValidationError
from ..images import MAX_IMAGE_BYTES, ImgurClient, check_image
from ..schemas import SessionData, UploadOut
from .deps import get_image_host, require_session

router = APIRouter(prefix="/api/upload", tags=["upload"])


async def _read_checked(file: UploadFile) -> bytes:
    # read one byte past the limit so oversize files are caught without buffering them whole
    content = await file.read(MAX_IMAGE_BYTES + 1)
    check_image(file.content_type, len(content))
    return content


@router.post("", response_model=UploadOut, response_model_by_alias=True)
async def upload_image(
    image: UploadFile = File(None),
    caller: SessionData = Depends(require_session),
    host: ImgurClient = Depends(get_image_host),
):
    if image is None:
        raise ValidationError("No file provided")
    content = await _read_checked(image)
    uploaded = await host.upload(content)
    return UploadOut(url=uploaded.url, delete_hash=uploaded.delete_hash)


@router.post("/batch", response_model=List[UploadOut], response_model_by_alias=True)
async def upload_images(
    images: List[UploadFile] = File(None),
    caller: SessionData = Depends(require_session),
    host: ImgurClient = Depends(get_image_host),
):
    if not images:
        raise ValidationError("No file provided")
    # validate everything before anything is sent upstream
    contents = [await _read_checked(f) for f in images]
    uploaded = await host.upload_all(contents)
    return [UploadOut(url=u.url, delete_hash=u.delete_hash) for u in uploaded]
