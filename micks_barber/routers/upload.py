import logging
import random
import time
from pathlib import Path

from fastapi import APIRouter, File, HTTPException, UploadFile
from fastapi.responses import FileResponse

from micks_barber import config

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/upload", tags=["upload"])

# extensão -> tipo servido ao app
ALLOWED_RECEIPT_TYPES = {
    ".jpeg": "image/jpeg",
    ".jpg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
}
ALLOWED_RECEIPT_MIME_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}

RECEIPTS_URL_PREFIX = "/uploads/receipts"


def receipts_dir() -> Path:
    path = Path(config.UPLOAD_DIR) / "receipts"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _safe_receipt_path(filename: str) -> Path:
    # bloqueia path traversal
    if not filename or ".." in filename or "/" in filename or "\\" in filename:
        raise HTTPException(status_code=400, detail="Invalid filename")

    path = receipts_dir() / filename
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Receipt not found")
    return path


@router.post("/receipt")
async def upload_receipt(receipt: UploadFile = File(...)):
    """Salva o comprovante em disco e devolve a URL pública."""
    original_name = receipt.filename or ""
    ext = Path(original_name).suffix.lower()

    if ext not in ALLOWED_RECEIPT_TYPES or receipt.content_type not in ALLOWED_RECEIPT_MIME_TYPES:
        logger.warning("Rejected receipt upload %r (%s)", original_name, receipt.content_type)
        raise HTTPException(
            status_code=400,
            detail="Only image files are allowed (JPEG, PNG, GIF, WebP)",
        )

    # lê um byte além do limite para detectar arquivo grande sem carregar tudo
    content = await receipt.read(config.MAX_RECEIPT_SIZE + 1)
    if len(content) > config.MAX_RECEIPT_SIZE:
        raise HTTPException(
            status_code=400,
            detail=f"File too large (max {config.MAX_RECEIPT_SIZE // (1024 * 1024)}MB)",
        )
    if not content:
        raise HTTPException(status_code=400, detail="No file uploaded")

    filename = f"receipt-{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"
    path = receipts_dir() / filename
    path.write_bytes(content)

    logger.info("Stored receipt %s (%d bytes)", filename, len(content))

    return {
        "success": True,
        "message": "Receipt uploaded successfully",
        "data": {
            "filename": filename,
            "originalName": original_name,
            "size": len(content),
            "url": f"{RECEIPTS_URL_PREFIX}/{filename}",
        },
    }


@router.get("/receipt/{filename}")
def get_receipt(filename: str):
    path = _safe_receipt_path(filename)
    return FileResponse(
        path,
        media_type=ALLOWED_RECEIPT_TYPES.get(path.suffix.lower(), "application/octet-stream"),
        headers={"Content-Disposition": f'inline; filename="{filename}"'},
    )


@router.delete("/receipt/{filename}")
def delete_receipt(filename: str):
    path = _safe_receipt_path(filename)
    path.unlink()
    logger.info("Deleted receipt %s", filename)
    return {"success": True, "message": "Receipt deleted successfully"}
