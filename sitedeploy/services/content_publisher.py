"""
Content Publisher
Walks a local build folder and uploads every file to the website origin
"""

import mimetypes
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Tuple, Union

from sitedeploy.api.base_provider import ObjectStoreClient
from sitedeploy.api.exceptions import ProviderError, ProvisioningError
from sitedeploy.models import ContentFile
from sitedeploy.utils.logger import get_logger

logger = get_logger(__name__)


CONTENT_TYPES = {
    '.html': 'text/html',
    '.htm': 'text/html',
    '.css': 'text/css',
    '.js': 'application/javascript',
    '.mjs': 'application/javascript',
    '.json': 'application/json',
    '.map': 'application/json',
    '.webmanifest': 'application/manifest+json',
    '.png': 'image/png',
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.gif': 'image/gif',
    '.webp': 'image/webp',
    '.avif': 'image/avif',
    '.svg': 'image/svg+xml',
    '.ico': 'image/x-icon',
    '.woff': 'font/woff',
    '.woff2': 'font/woff2',
    '.ttf': 'font/ttf',
    '.otf': 'font/otf',
    '.eot': 'application/vnd.ms-fontobject',
    '.xml': 'application/xml',
    '.txt': 'text/plain',
    '.pdf': 'application/pdf',
    '.wasm': 'application/wasm',
}

DEFAULT_CONTENT_TYPE = 'application/octet-stream'


def _raise_walk_error(error: OSError) -> None:
    raise error


def walk_content(root: Union[str, Path]) -> List[ContentFile]:
    """
    Enumerate every regular file below ``root``.

    Keys use forward slashes regardless of platform. Symlinked directories
    are not followed.

    Args:
        root: Content folder

    Returns:
        ContentFile entries sorted by relative path

    Raises:
        OSError: If a directory cannot be listed or an entry is not a
            readable regular file (e.g. a dangling symlink)
    """
    root = Path(root)
    files = []

    for dirpath, _dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
        for filename in filenames:
            local_path = Path(dirpath) / filename
            if not local_path.is_file():
                raise OSError(f"Not a regular file or a broken link: {local_path}")
            relative_path = local_path.relative_to(root).as_posix()
            files.append(ContentFile(
                relative_path=relative_path,
                absolute_path=local_path,
                size_bytes=local_path.stat().st_size,
            ))

    return sorted(files, key=lambda f: f.relative_path)


def content_size(root: Union[str, Path]) -> int:
    """Total size in bytes of every file below ``root``"""
    return sum(f.size_bytes for f in walk_content(root))


def get_content_type(filename: str) -> str:
    """
    Determine content type based on file extension.

    Known web asset extensions come from a fixed table; anything else falls
    back to the platform MIME database, then to application/octet-stream.
    """
    extension = Path(filename).suffix.lower()

    if extension in CONTENT_TYPES:
        return CONTENT_TYPES[extension]

    guessed, _ = mimetypes.guess_type(filename)
    return guessed or DEFAULT_CONTENT_TYPE


class ContentPublisher:
    """
    Uploads a content tree to an origin with overwrite semantics.
    The upload is one step: a single failed file fails the whole publish.
    """

    def __init__(self, object_store: ObjectStoreClient, max_workers: int = 4):
        """
        Args:
            object_store: Origin client
            max_workers: Concurrent uploads (1 = sequential)
        """
        self.object_store = object_store
        self.max_workers = max(1, max_workers)

    def publish(self, root: Union[str, Path], origin_name: str) -> Tuple[int, int]:
        """
        Upload every file under ``root`` to ``origin_name``.

        Args:
            root: Content folder
            origin_name: Target origin (bucket)

        Returns:
            Tuple of (files_uploaded, bytes_uploaded)

        Raises:
            ProviderError: If any upload fails
        """
        try:
            files = walk_content(root)
        except OSError as e:
            raise ProviderError(f"Could not read content folder {root}: {e}", operation="PutObject") from e
        total_bytes = sum(f.size_bytes for f in files)

        logger.info(f"Uploading {len(files)} file(s) ({total_bytes} bytes) to {origin_name}")

        if self.max_workers == 1 or len(files) <= 1:
            for content_file in files:
                self._upload(origin_name, content_file)
        else:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(self._upload, origin_name, f) for f in files]
                # result() re-raises the first failure; remaining uploads finish
                # before the pool exits and are simply overwritten on the next run
                for future in futures:
                    future.result()

        logger.info(f"✅ Published {len(files)} file(s) to {origin_name}")
        return len(files), total_bytes

    def _upload(self, origin_name: str, content_file: ContentFile) -> None:
        content_type = get_content_type(content_file.relative_path)
        logger.debug(f"Uploading: {content_file.relative_path} ({content_type})")

        try:
            body = content_file.absolute_path.read_bytes()
        except OSError as e:
            raise ProviderError(
                f"Could not read {content_file.absolute_path}: {e}",
                operation="PutObject",
            ) from e

        try:
            self.object_store.put_object(origin_name, content_file.relative_path, body, content_type)
        except ProvisioningError:
            logger.error(f"❌ Upload failed: {content_file.relative_path}")
            raise
