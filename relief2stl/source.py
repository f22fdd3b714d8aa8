"""Image source: decode a local file or an http(s) URL into a PIL image."""

import io

import requests
from PIL import Image, UnidentifiedImageError

from .errors import DecodeError


def is_url(path_or_url: str) -> bool:
    return str(path_or_url).startswith(("http://", "https://"))


def open_image(path_or_url, timeout: float = 30.0) -> Image.Image:
    """
    Load and fully decode an image.  Network, file-system and decoder
    failures all surface as DecodeError.
    """
    try:
        if is_url(path_or_url):
            resp = requests.get(path_or_url, timeout=timeout)
            resp.raise_for_status()
            img = Image.open(io.BytesIO(resp.content))
        else:
            img = Image.open(path_or_url)
        img.load()
    except requests.RequestException as exc:
        raise DecodeError(f"Failed to download {path_or_url}: {exc}", {"source": str(path_or_url)}) from exc
    except (UnidentifiedImageError, OSError) as exc:
        raise DecodeError(f"Failed to decode {path_or_url}: {exc}", {"source": str(path_or_url)}) from exc

    print(f"[source] {path_or_url}: {img.size[0]} × {img.size[1]} px  mode={img.mode}")
    return img
