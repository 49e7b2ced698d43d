"""Upload sinks for qualifying attachments."""

from ..core.interfaces import UploadError
from .flickr import FlickrUploader

__all__ = ["FlickrUploader", "UploadError"]
