"""Slash-delimited path handling.

경로 문자열을 컬렉션/문서 세그먼트로 변환합니다. 상태가 없는 순수 함수만 둡니다.

Segments alternate collection name / document id, so a document path has an
even number of segments and a collection path an odd number.
"""

import secrets
import string

from memfire.errors import PathError

AUTO_ID_ALPHABET = string.ascii_letters + string.digits


def split_path(path: str) -> tuple[str, ...]:
    """Split a path into segments.

    Leading and trailing slashes are ignored.

    Args:
        path: Path such as ``"users/alice/orders"``.

    Returns:
        Tuple of segments.

    Raises:
        PathError: If the path is empty or has an empty inner segment.
    """
    if not isinstance(path, str):
        raise PathError(f"Path must be a string, got {type(path).__name__}")
    stripped = path.strip("/")
    if not stripped:
        raise PathError("Path must not be empty", path)
    segments = tuple(stripped.split("/"))
    if any(segment == "" for segment in segments):
        raise PathError("Path must not contain empty segments", path)
    return segments


def document_segments(path: str) -> tuple[str, ...]:
    """Segments of a document path (even length)."""
    segments = split_path(path)
    if len(segments) % 2 != 0:
        raise PathError("Document path must have an even number of segments", path)
    return segments


def collection_segments(path: str) -> tuple[str, ...]:
    """Segments of a collection path (odd length)."""
    segments = split_path(path)
    if len(segments) % 2 != 1:
        raise PathError("Collection path must have an odd number of segments", path)
    return segments


def join_path(*segments: str) -> str:
    return "/".join(segments)


def child_path(parent: str, relative: str) -> str:
    """Append a relative path to a parent path."""
    return join_path(*split_path(parent), *split_path(relative))


def generate_document_id(length: int = 20) -> str:
    """Random document id drawn from ``[A-Za-z0-9]``.

    Args:
        length: Number of characters, at least 20.
    """
    if length < 20:
        raise ValueError("Document ids must be at least 20 characters")
    return "".join(secrets.choice(AUTO_ID_ALPHABET) for _ in range(length))
