import logging

from django.core.files.storage import default_storage

from core_backend.exceptions import DependencyFailure

logger = logging.getLogger(__name__)


class ImageService:
    """
    Menu images are uploaded straight to the blob store by the client; the
    menu item only keeps the returned URL and public id. This service removes
    the stored object when an item goes away.
    """

    def __init__(self, storage=None):
        self.storage = storage or default_storage

    def delete_image(self, public_id: str) -> None:
        if not public_id:
            return
        try:
            if self.storage.exists(public_id):
                self.storage.delete(public_id)
            logger.info(f"Deleted menu image: {public_id}")
        except Exception as e:
            raise DependencyFailure(f"Could not delete image {public_id}: {e}")


image_service = ImageService()
