"""Upload image attachments from incoming mail to Flickr."""

from .core.config import ListenerConfig, load_listener_config
from .listener import build_listener, create_listener

__all__ = [
    "ListenerConfig",
    "build_listener",
    "create_listener",
    "load_listener_config",
]
