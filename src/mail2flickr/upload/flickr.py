"""Flickr upload sink using OAuth 1.0a signed multipart requests."""

from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlencode
from xml.etree import ElementTree

import httpx
from authlib.oauth1 import ClientAuth

from ..core.config import FlickrSettings
from ..core.interfaces import UploadError, UploadSink

LOGGER = logging.getLogger(__name__)

_FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


class FlickrUploader(UploadSink):
    """Upload local image files to a Flickr account."""

    def __init__(
        self, settings: FlickrSettings, *, client: httpx.Client | None = None
    ) -> None:
        """Initialise the uploader with credentials and an optional HTTP client."""
        if not (
            settings.consumer_key
            and settings.consumer_secret
            and settings.oauth_token
            and settings.oauth_token_secret
        ):
            raise UploadError("Flickr credentials are not configured")
        self._settings = settings
        self._client = client
        self._auth = ClientAuth(
            settings.consumer_key,
            client_secret=settings.consumer_secret,
            token=settings.oauth_token,
            token_secret=settings.oauth_token_secret,
        )

    def upload(self, path: Path, *, title: str | None = None) -> str:
        """Upload the file at ``path`` and return the Flickr photo id."""
        fields = self._form_fields(title)
        try:
            headers = self._sign(fields)
            with path.open("rb") as handle:
                files = {"photo": (path.name, handle)}
                response = self._post(headers, fields, files)
            response.raise_for_status()
        except OSError as exc:
            raise UploadError(f"Unable to read {path}") from exc
        except httpx.HTTPError as exc:
            raise UploadError(f"Flickr upload request failed: {exc}") from exc
        except (httpx.InvalidURL, ValueError) as exc:
            raise UploadError(f"Invalid Flickr upload request: {exc}") from exc

        photo_id = _parse_photo_id(response.text)
        LOGGER.debug("Flickr accepted %s as photo %s", path, photo_id)
        return photo_id

    # Internal helpers ---------------------------------------------------------
    def _form_fields(self, title: str | None) -> dict[str, str]:
        fields: dict[str, str] = {}
        if title:
            fields["title"] = title
        if self._settings.tags:
            fields["tags"] = self._settings.tags
        for name in ("is_public", "is_friend", "is_family"):
            value = getattr(self._settings, name)
            if value is not None:
                fields[name] = "1" if value else "0"
        return fields

    def _sign(self, fields: dict[str, str]) -> dict[str, str]:
        # Flickr signs the non-file form fields as if they were url-encoded.
        _, signed, _ = self._auth.prepare(
            "POST",
            self._settings.upload_url,
            {"Content-Type": _FORM_CONTENT_TYPE},
            urlencode(fields),
        )
        return {"Authorization": signed["Authorization"]}

    def _post(
        self,
        headers: dict[str, str],
        fields: dict[str, str],
        files: dict[str, tuple[str, object]],
    ) -> httpx.Response:
        if self._client is not None:
            return self._client.post(
                self._settings.upload_url,
                headers=headers,
                data=fields,
                files=files,
                timeout=self._settings.timeout_seconds,
            )
        return httpx.post(
            self._settings.upload_url,
            headers=headers,
            data=fields,
            files=files,
            timeout=self._settings.timeout_seconds,
        )


def _parse_photo_id(body: str) -> str:
    """Extract the photo id from a Flickr upload response."""
    try:
        root = ElementTree.fromstring(body)
    except ElementTree.ParseError as exc:
        raise UploadError("Flickr returned a malformed response") from exc

    if root.get("stat") != "ok":
        error = root.find("err")
        code = error.get("code") if error is not None else None
        message = error.get("msg") if error is not None else None
        raise UploadError(f"Flickr rejected the upload (code {code}): {message}")

    photo_id = (root.findtext("photoid") or "").strip()
    if not photo_id:
        raise UploadError("Flickr response missing 'photoid'")
    return photo_id


__all__ = ["FlickrUploader"]
