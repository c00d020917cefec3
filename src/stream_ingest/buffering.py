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
"""Collect a byte source into memory, bounded by a maximum length."""


from __future__ import annotations

import logging
from contextlib import aclosing

from ingest_common.logging import get_burst_suppressed_logger

from .byte_source import ByteSource, iter_source
from .config import settings
from .errors import MaxLengthExceeded

logger = logging.getLogger(__name__)
burst_suppressed_logger = get_burst_suppressed_logger(f"{__name__}.handle_error")


async def buffer_stream(source: ByteSource, max_length: int | None = None) -> bytes:
    """Buffer all contents from <source>, up to <max_length> bytes.

    The length check happens right after each chunk arrives, so a breach is
    reported before any later event from <source> is observed. On breach the
    <source> is closed if it is an async generator.

    Args:
        source: the byte source to consume.
        max_length: the maximum total length, 0 means no limit. If not specified,
            use the DEFAULT_MAX_BUFFER_LENGTH setting(defaults to 0).

    Raises:
        ValueError if <max_length> is negative.
        MaxLengthExceeded if the total length goes beyond <max_length>.
        SourceReadError if <source> reports an error before that.
    """
    if max_length is None:
        max_length = settings.DEFAULT_MAX_BUFFER_LENGTH
    if max_length < 0:
        raise ValueError(f"invalid {max_length=}, must be >= 0")

    buffered = bytearray()
    async with aclosing(iter_source(source)) as _chunks:
        async for chunk in _chunks:
            # NOTE: copy the chunk in, the source might reuse its buffer.
            buffered += chunk
            if max_length and len(buffered) > max_length:
                burst_suppressed_logger.warning(
                    f"abort buffering: {len(buffered)=} exceeds {max_length=}"
                )
                raise MaxLengthExceeded(max_length)
    return bytes(buffered)
