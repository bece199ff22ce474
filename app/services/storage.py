import logging

from supabase import Client, create_client

from app.config import settings
from app.exceptions import ConfigError, UpstreamError

logger = logging.getLogger(__name__)

ANNOUNCEMENTS_BUCKET = "announcements"
BUCKET_FILE_SIZE_LIMIT = 10 * 1024 * 1024  # 10MB
BUCKET_ALLOWED_MIME_TYPES = [
    "image/jpeg",
    "image/png",
    "image/gif",
    "video/mp4",
    "application/pdf",
]


def get_supabase_client() -> Client:
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise ConfigError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set")
    return create_client(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY)


class StorageService:
    def __init__(self, client: Client):
        self.client = client

    def ensure_announcements_bucket(self) -> dict:
        """Create the public announcements bucket unless it already exists."""
        try:
            buckets = self.client.storage.list_buckets()
        except Exception as e:
            logger.error(f"Listing storage buckets failed: {e}", exc_info=True)
            raise UpstreamError(f"Could not list storage buckets: {e}") from e

        exists = any(
            getattr(bucket, "name", None) == ANNOUNCEMENTS_BUCKET for bucket in buckets or []
        )
        if not exists:
            try:
                self.client.storage.create_bucket(
                    ANNOUNCEMENTS_BUCKET,
                    options={
                        "public": True,
                        "file_size_limit": BUCKET_FILE_SIZE_LIMIT,
                        "allowed_mime_types": BUCKET_ALLOWED_MIME_TYPES,
                    },
                )
            except Exception as e:
                logger.error(f"Creating storage bucket failed: {e}", exc_info=True)
                raise UpstreamError(f"Could not create storage bucket: {e}") from e
            logger.info(f"Created {ANNOUNCEMENTS_BUCKET} bucket")

        return {
            "success": True,
            "message": "Storage bucket initialized successfully",
            "bucket_exists": exists,
        }
