"""Business logic: the upload pipeline, admin operations and the filter engine."""

from story_recorder.services.admin_service import AdminService
from story_recorder.services.upload_service import UploadService

__all__ = ["AdminService", "UploadService"]
