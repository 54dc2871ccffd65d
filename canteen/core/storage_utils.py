# canteen/core/storage_utils.py
import uuid

from canteen.core.config import get_settings
from canteen.core.supabase_client import supabase_admin

settings = get_settings()

BUCKET = settings.SUPABASE_STORAGE_BUCKET


def _bucket():
    # Resolved lazily so the API boots without Supabase credentials.
    return supabase_admin().storage.from_(BUCKET)


def upload_to_storage(path: str, file_bytes: bytes) -> str:
    """
    Upload raw bytes to Supabase Storage and return a public URL.

    Existing objects at the same path are overwritten ('upsert').

    Args:
        path: Full object path inside the bucket.
              Example: "menu/butter-chicken/<uuid>.png"
        file_bytes: File content in bytes.

    Returns:
        Public URL to the uploaded file.
    """
    bucket = _bucket()
    bucket.upload(path, file_bytes, {"upsert": "true"})
    return bucket.get_public_url(path)


def delete_from_storage(path: str) -> None:
    """Delete a file from Supabase Storage by its object path."""
    _bucket().remove([path])


def extract_path_from_public_url(url: str) -> str | None:
    """
    Given a public URL, extract the object path relative to the bucket.

    Example:
        https://<proj>.supabase.co/storage/v1/object/public/assets/menu/x.png
        -> 'menu/x.png'

    Returns None for URLs outside this bucket (e.g. the seeded
    unsplash images).
    """
    marker = f"/storage/v1/object/public/{BUCKET}/"
    idx = url.find(marker)
    if idx == -1:
        return None
    return url[idx + len(marker) :]


def delete_public_url(url: str) -> None:
    """
    Convenience helper: delete a file by its public URL.
    No-op if the URL does not belong to this bucket.
    """
    path = extract_path_from_public_url(url)
    if path:
        delete_from_storage(path)


def generate_filename(ext: str) -> str:
    """Random "<uuid4>.<ext>" filename."""
    return f"{uuid.uuid4()}.{ext}"
