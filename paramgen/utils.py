"""Reading and writing parameter documents.

Documents are plain JSON. They can be read from disk or fetched over
http(s); they are always written to disk.
"""

import json
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import requests

from .logging_config import get_logger

logger = get_logger(__name__)

FETCH_TIMEOUT = 30


class DocumentIOError(Exception):
    """A document could not be read, fetched or parsed."""


def is_url(source: str | Path) -> bool:
    """True if source looks like an http(s) URL."""
    return isinstance(source, str) and urlparse(source).scheme in ("http", "https")


def read_json_file(path: str | Path) -> Any:
    """Parse the JSON document at ``path``.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        DocumentIOError: If it can't be read or isn't JSON.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"File not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise DocumentIOError(f"{path} is not valid UTF-8: {e.reason} at byte {e.start}") from e
    except OSError as e:
        raise DocumentIOError(f"Cannot read {path}: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DocumentIOError(
            f"Invalid JSON in {path} (line {e.lineno}, column {e.colno}): {e.msg}"
        ) from e

    logger.debug(f"Read {path}")
    return data


def fetch_json(url: str, timeout: float = FETCH_TIMEOUT) -> Any:
    """GET ``url`` and decode the body as JSON.

    Raises:
        DocumentIOError: On a malformed URL, a transport or HTTP error,
            or a body that isn't JSON.
    """
    parsed = urlparse(url)
    if not (parsed.scheme and parsed.netloc):
        raise DocumentIOError(f"Invalid URL: {url}")

    logger.debug(f"Fetching {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.Timeout as e:
        raise DocumentIOError(f"Request timeout after {timeout}s: {url}") from e
    except requests.exceptions.HTTPError as e:
        raise DocumentIOError(
            f"HTTP error {e.response.status_code} for {url}"
        ) from e
    except requests.exceptions.RequestException as e:
        raise DocumentIOError(f"Request to {url} failed: {e}") from e

    content_type = response.headers.get("content-type", "")
    if "json" not in content_type.lower():
        logger.warning(f"{url} answered with content type {content_type!r}")

    try:
        return response.json()
    except ValueError as e:
        raise DocumentIOError(f"Invalid JSON response from {url}") from e


def read_json(source: str | Path, timeout: float = FETCH_TIMEOUT) -> Any:
    """Read a document from a path or an http(s) URL."""
    if is_url(source):
        return fetch_json(str(source), timeout=timeout)
    return read_json_file(source)


def write_json(path: str | Path, data: Any) -> Path:
    """Write ``data`` as two-space indented JSON with a trailing newline.

    Parent directories are created as needed.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(data, indent=2, ensure_ascii=False)
    path.write_text(text + "\n", encoding="utf-8")
    logger.debug(f"Wrote {path}")
    return path
