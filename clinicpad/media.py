"""Copy picked or captured images into persistent app storage."""

import os
import shutil
import uuid
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from clinicpad.clinical_records.database import XrayAttachment, XrayRepository
from clinicpad.errors import StorageError, ValidationError
from clinicpad.forms import XrayForm, validate_form

load_dotenv(override=True)

DEFAULT_MEDIA_DIR = Path(__file__).parent / "clinical_records" / "media"


def get_media_dir() -> Path:
    return Path(os.environ.get("CLINICPAD_MEDIA_DIR", DEFAULT_MEDIA_DIR))


def store_image(source: str | Path, media_dir: str | Path | None = None) -> str:
    """Copy an image file into the media directory and return the new path.

    The original file name is kept; a short suffix is added when that name
    is already taken.
    """
    source = Path(source)
    if not source.is_file():
        raise ValidationError(["file_path"], "No image selected.")

    target_dir = Path(media_dir) if media_dir else get_media_dir()
    target = target_dir / source.name
    if target.exists():
        target = target_dir / f"{source.stem}-{uuid.uuid4().hex[:8]}{source.suffix}"

    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copy2(source, target)
    except OSError as e:
        logger.error(f"Copying {source} into {target_dir} failed: {e}")
        raise StorageError("store image", str(e)) from e

    logger.info(f"Stored image {source.name} as {target}")
    return str(target)


def attach_xray(
    source: str | Path,
    description: str,
    patient_id: int | None = None,
    appointment_id: int | None = None,
    appointment_date: str | None = None,
    repo: XrayRepository | None = None,
) -> XrayAttachment:
    """Validate, copy the image, then record it."""
    form = validate_form(XrayForm, {
        "file_path": str(source),
        "description": description,
        "patient_id": patient_id,
        "appointment_id": appointment_id,
        "appointment_date": appointment_date,
    })
    xray = form.to_xray()
    xray.file_path = store_image(source)
    try:
        return (repo or XrayRepository()).create(xray)
    except StorageError:
        logger.warning(f"Removing {xray.file_path}, its X-ray row was not saved")
        Path(xray.file_path).unlink(missing_ok=True)
        raise
