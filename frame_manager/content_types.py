"""
Image content types by file extension, shared by the admin UI and the storage backends
"""
from pathlib import Path

CONTENT_TYPES = {
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif': 'image/gif',
    '.bmp': 'image/bmp',
    '.webp': 'image/webp',
    '.svg': 'image/svg+xml'
}


def content_type_for(filename: str) -> str:
    """Map the file extension to a content type"""
    return CONTENT_TYPES.get(Path(filename).suffix.lower(), 'application/octet-stream')
