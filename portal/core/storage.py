# portal/core/storage.py

import os
from functools import lru_cache
from urllib.parse import quote

from fastapi.responses import FileResponse, Response
from loguru import logger
from starlette.concurrency import run_in_threadpool
from supabase import create_client, Client

from portal.core.config import settings
from portal.core.exceptions import StorageFileNotFound, StorageUnavailable


# ------------------------------------------------------------
# Public disk contract
# ------------------------------------------------------------
class PublicDisk:
    """
    The publicly readable storage area attachments point into.
    Paths are relative, without a leading slash or 'storage/' prefix.
    """

    async def exists(self, path: str) -> bool:
        """Raises StorageUnavailable if the backend cannot answer."""
        raise NotImplementedError

    async def download(self, path: str, filename: str, media_type: str | None = None) -> Response:
        """Raises StorageFileNotFound if the file vanished."""
        raise NotImplementedError


def attachment_disposition(filename: str) -> str:
    quoted = quote(filename)
    if quoted != filename:
        return f"attachment; filename*=utf-8''{quoted}"
    return f'attachment; filename="{filename}"'


# ------------------------------------------------------------
# 1. Local directory (default)
# ------------------------------------------------------------
class LocalPublicDisk(PublicDisk):
    def __init__(self, root: str):
        self.root = os.path.realpath(root)

    def full_path(self, path: str) -> str | None:
        # lexical check only: symlinked trees such as legacy/ may point outside the root
        full = os.path.normpath(os.path.join(self.root, path))
        if os.path.commonpath([self.root, full]) != self.root:
            return None
        return full

    async def exists(self, path: str) -> bool:
        full = self.full_path(path)
        return full is not None and os.path.isfile(full)

    async def download(self, path: str, filename: str, media_type: str | None = None) -> Response:
        full = self.full_path(path)
        if full is None or not os.path.isfile(full):
            raise StorageFileNotFound(path)

        return FileResponse(
            full,
            filename=filename,
            media_type=media_type,
            content_disposition_type="attachment",
        )


# ------------------------------------------------------------
# 2. Supabase Storage bucket
# ------------------------------------------------------------
class SupabasePublicDisk(PublicDisk):
    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    async def exists(self, path: str) -> bool:
        folder, _, name = path.rpartition("/")
        try:
            entries = await run_in_threadpool(
                self.client.storage.from_(self.bucket).list, folder, {"search": name}
            )
        except Exception as e:
            logger.error(f"Supabase list failed for {path}: {e}")
            raise StorageUnavailable(path) from e
        return any(entry.get("name") == name for entry in entries or [])

    async def download(self, path: str, filename: str, media_type: str | None = None) -> Response:
        try:
            content = await run_in_threadpool(self.client.storage.from_(self.bucket).download, path)
        except Exception as e:
            logger.error(f"Supabase download failed for {path}: {e}")
            raise StorageFileNotFound(path) from e

        return Response(
            content=content,
            media_type=media_type or "application/octet-stream",
            headers={"Content-Disposition": attachment_disposition(filename)},
        )


# ------------------------------------------------------------
# Dependency
# ------------------------------------------------------------
@lru_cache(maxsize=1)
def get_public_disk() -> PublicDisk:
    backend = settings.STORAGE_BACKEND.lower().strip()

    if backend == "supabase":
        if not settings.SUPABASE_URL or not settings.SUPABASE_KEY:
            raise RuntimeError("STORAGE_BACKEND=supabase requires SUPABASE_URL and SUPABASE_KEY")
        logger.info(f"Public storage: Supabase bucket '{settings.SUPABASE_BUCKET}'")
        return SupabasePublicDisk(
            create_client(settings.SUPABASE_URL, settings.SUPABASE_KEY),
            settings.SUPABASE_BUCKET,
        )

    logger.info(f"Public storage: local directory '{settings.PUBLIC_STORAGE_ROOT}'")
    return LocalPublicDisk(settings.PUBLIC_STORAGE_ROOT)
