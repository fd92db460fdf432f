from fastapi import APIRouter, File, Request, UploadFile

from app.models.schemas import UploadResponse
from app.services import uploads

router = APIRouter(prefix="/uploads", tags=["uploads"])


@router.post("", response_model=UploadResponse, status_code=201)
def upload_voucher(request: Request, file: UploadFile = File(...)):
    filename = uploads.save_upload(file.file, file.filename)
    return {"filename": filename, "url": uploads.public_url(str(request.base_url), filename)}
