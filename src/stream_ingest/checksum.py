# Copyright 2022 TIER IV, INC. All rights reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""Compute the checksum of a byte source."""


from __future__ import annotations

import hashlib
import logging
from contextlib import aclosing

from ingest_common._typing import StrOrPath
from ingest_common.logging import get_burst_suppressed_logger

from .byte_source import ByteSource, file_source, iter_source
from .config import HashAlgorithm, settings
from .errors import SourceReadError, UnsupportedAlgorithm

logger = logging.getLogger(__name__)
burst_suppressed_logger = get_burst_suppressed_logger(f"{__name__}.handle_error")


def get_hash_algorithm(algorithm: str | HashAlgorithm | None) -> HashAlgorithm:
    """
    Raises:
        UnsupportedAlgorithm if <algorithm> is not in the allow-list.
    """
    if algorithm is None:
        return settings.DEFAULT_HASH_ALGORITHM
    try:
        return HashAlgorithm(str(algorithm).lower())
    except ValueError:
        raise UnsupportedAlgorithm(str(algorithm)) from None


async def digest_stream(
    source: ByteSource, algorithm: str | HashAlgorithm | None = None
) -> str:
    """Fold all chunks from <source> into a hash, and return its hex digest.

    Raises:
        UnsupportedAlgorithm if <algorithm> is not supported.
        SourceReadError if <source> reports an error.
    """
    hash_obj = hashlib.new(get_hash_algorithm(algorithm))
    async with aclosing(iter_source(source)) as chunks:
        async for chunk in chunks:
            hash_obj.update(chunk)
    return hash_obj.hexdigest()


async def make_checksum(
    fpath: StrOrPath,
    algorithm: str | HashAlgorithm | None = None,
    *,
    chunk_size: int | None = None,
) -> str:
    """Compute the checksum of file at <fpath>, with <algorithm> defaults to
    the DEFAULT_HASH_ALGORITHM setting(md5).

    The algorithm is validated before the file is opened.

    Returns:
        The lowercase hex digest of the file contents.

    Raises:
        UnsupportedAlgorithm if <algorithm> is not supported.
        SourceReadError wrapping the OSError if failed to read the file.
    """
    _algorithm = get_hash_algorithm(algorithm)
    try:
        return await digest_stream(
            file_source(fpath, chunk_size=chunk_size), _algorithm
        )
    except SourceReadError as e:
        burst_suppressed_logger.warning(f"failed to checksum {fpath}: {e.cause!r}")
        raise
