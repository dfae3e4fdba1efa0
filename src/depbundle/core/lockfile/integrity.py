"""Content integrity hashing.

Package content is streamed through SHA-512 in fixed-size chunks and the
digest is base64 encoded. Identical bytes always yield the identical string.
The cancellation token is checked between chunks so hashing a large
package can be aborted.
"""

from __future__ import annotations

import base64
import hashlib
from typing import BinaryIO

from depbundle.cancellation import CancellationToken

HASH_ALGORITHM = "sha512"
CHUNK_SIZE = 64 * 1024


def compute_sha(stream: BinaryIO, cancellation: CancellationToken | None = None) -> str:
    """Hash everything remaining in *stream*; return the base64 digest.

    Raises:
        OperationCancelledError: If cancellation is requested mid-stream.
    """
    digest = hashlib.new(HASH_ALGORITHM)
    while True:
        if cancellation is not None:
            cancellation.raise_if_cancelled()
        chunk = stream.read(CHUNK_SIZE)
        if not chunk:
            break
        digest.update(chunk)
    return base64.b64encode(digest.digest()).decode("ascii")


def compute_sha_bytes(content: bytes | str) -> str:
    """Convenience wrapper for in-memory content."""
    if isinstance(content, str):
        content = content.encode("utf-8")
    return base64.b64encode(hashlib.new(HASH_ALGORITHM, content).digest()).decode("ascii")
