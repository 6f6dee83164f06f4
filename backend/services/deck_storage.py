"""
Service de stockage des decks (Cloudinary)
Upload, remplacement et suppression des fichiers joints aux prospects

Règles:
- Les decks sont stockés dans le dossier DECK_FOLDER, resource_type "raw"
- La suppression est best-effort: un échec est loggé, jamais propagé
- Le fichier temporaire local est toujours supprimé après l'upload
"""

import asyncio
import logging
import os
import tempfile
from pathlib import Path
from typing import NamedTuple, Optional

import cloudinary
import cloudinary.uploader
from fastapi import UploadFile

from config import (
    CLOUDINARY_CLOUD_NAME,
    CLOUDINARY_API_KEY,
    CLOUDINARY_API_SECRET,
    CLOUDINARY_TIMEOUT,
    DECK_FOLDER,
)
from services.errors import DeckUploadError

logger = logging.getLogger("deck_storage")

RESOURCE_TYPE = "raw"

cloudinary.config(
    cloud_name=CLOUDINARY_CLOUD_NAME,
    api_key=CLOUDINARY_API_KEY,
    api_secret=CLOUDINARY_API_SECRET,
    secure=True,
)


class DeckRef(NamedTuple):
    """Public URL + opaque Cloudinary id of an uploaded deck"""
    url: str
    public_id: str


# ==================== REMOTE ====================

async def upload_deck(local_path: str, folder: str = DECK_FOLDER) -> DeckRef:
    """Upload a local file and return its reference"""
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.upload,
            local_path,
            folder=folder,
            resource_type=RESOURCE_TYPE,
            timeout=CLOUDINARY_TIMEOUT,
        )
    except Exception as e:
        logger.error(f"Upload failed for {local_path}: {str(e)}")
        raise DeckUploadError(f"Deck upload failed: {str(e)}") from e

    logger.info(f"Deck uploaded: {result.get('public_id')}")
    return DeckRef(result.get("secure_url", ""), result.get("public_id", ""))


async def destroy_deck(public_id: str) -> bool:
    """
    Delete a remote deck. Never raises.

    Returns True when Cloudinary acknowledged the deletion.
    """
    if not public_id:
        return False
    try:
        result = await asyncio.to_thread(
            cloudinary.uploader.destroy,
            public_id,
            resource_type=RESOURCE_TYPE,
        )
    except Exception as e:
        logger.warning(f"Cloudinary destroy error for {public_id}: {str(e)}")
        return False

    ok = (result or {}).get("result") == "ok"
    if not ok:
        logger.warning(f"Cloudinary destroy for {public_id} returned {result}")
    return ok


# ==================== FICHIERS TEMPORAIRES ====================

async def save_upload_to_tmp(upload: UploadFile) -> str:
    """Spool an incoming upload to a temporary file and return its path"""
    suffix = Path(upload.filename or "").suffix.lower()
    content = await upload.read()

    fd, path = tempfile.mkstemp(prefix="deck_", suffix=suffix)
    with os.fdopen(fd, "wb") as f:
        f.write(content)
    return path


def release_tmp_file(path: str) -> None:
    try:
        os.unlink(path)
    except OSError as e:
        logger.warning(f"Could not remove temporary file {path}: {str(e)}")


# ==================== ORCHESTRATION ====================

async def store_deck(upload: UploadFile) -> DeckRef:
    """Upload an incoming file; the local copy is released whatever happens"""
    path = await save_upload_to_tmp(upload)
    try:
        return await upload_deck(path)
    finally:
        release_tmp_file(path)


async def replace_deck(previous_public_id: Optional[str], upload: UploadFile) -> DeckRef:
    """
    Swap the deck of an existing prospect.

    The old file is removed first; failing to remove it never blocks the
    new upload.
    """
    if previous_public_id:
        await destroy_deck(previous_public_id)
    return await store_deck(upload)
