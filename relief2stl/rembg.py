"""
Background-removal collaborators.

A remover takes a PIL image and returns a PIL image whose alpha channel
marks the subject.  The pipeline only depends on ``remove()``; the HTTP
variant talks to a segmentation service that accepts an uploaded PNG and
answers with the cut-out image.
"""

import io

import requests
from PIL import Image, UnidentifiedImageError

from .errors import RemovalError


class BackgroundRemover:
    def remove(self, image: Image.Image) -> Image.Image:
        raise NotImplementedError


class PassthroughRemover(BackgroundRemover):
    """Returns the image untouched."""

    def remove(self, image: Image.Image) -> Image.Image:
        return image


class HTTPRemover(BackgroundRemover):
    """
    POSTs the image as ``multipart/form-data`` (field ``image``, PNG) to
    ``url`` and decodes the response body as an image.
    """

    def __init__(self, url: str, timeout: float = 60.0, session: requests.Session = None):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def remove(self, image: Image.Image) -> Image.Image:
        buf = io.BytesIO()
        image.save(buf, format="PNG")
        files = {"image": ("image.png", buf.getvalue(), "image/png")}

        print(f"[rembg] Uploading {image.size[0]} × {image.size[1]} px to {self.url}")
        try:
            resp = self.session.post(self.url, files=files, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise RemovalError(f"Request to {self.url} failed: {exc}", {"url": self.url}) from exc

        try:
            out = Image.open(io.BytesIO(resp.content))
            out.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise RemovalError(f"Service returned an undecodable image: {exc}", {"url": self.url}) from exc

        print(f"[rembg] Received {out.size[0]} × {out.size[1]} px ({out.mode})")
        return out
