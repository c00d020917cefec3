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
"""Byte source boundary of stream_ingest.

A byte source is any async iterable of bytes chunks. Exhausting the iteration
is the end event, an exception raised from the iteration is the error event.
anyio's ByteReceiveStream and plain async generators both qualify.
"""


from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import AsyncGenerator, AsyncIterable, AsyncIterator, Optional, Union

from anyio import open_file
from typing_extensions import Protocol, TypeAlias, runtime_checkable

from ingest_common._typing import StrOrPath

from .config import settings
from .errors import SourceReadError

Chunk: TypeAlias = Union[bytes, bytearray]
ByteSource: TypeAlias = AsyncIterable[Chunk]


@runtime_checkable
class NamedPart(Protocol):
    """A byte source with caller-declared metadata, i.e., one part of a multipart upload."""

    @property
    def filename(self) -> Optional[str]: ...

    @property
    def content_type(self) -> Optional[str]: ...

    def __aiter__(self) -> AsyncIterator[Chunk]: ...


@dataclass(frozen=True)
class Part:
    """Attach declared filename and content type to a byte source."""

    source: ByteSource
    filename: Optional[str] = None
    content_type: Optional[str] = None

    def __aiter__(self) -> AsyncIterator[Chunk]:
        return self.source.__aiter__()


async def file_source(
    fpath: StrOrPath, *, chunk_size: int | None = None
) -> AsyncGenerator[bytes]:
    """Open and read a file asynchronously in chunks."""
    chunk_size = chunk_size or settings.READ_CHUNK_SIZE
    async with await open_file(fpath, "rb") as f:
        while data := await f.read(chunk_size):
            yield data


async def iter_source(source: ByteSource) -> AsyncGenerator[Chunk]:
    """Iterate through <source>, converting its error event into SourceReadError.

    If the iteration is closed before <source> ends, <source> is also closed
    when it is an async generator.

    Raises:
        SourceReadError wrapping any exception raised by <source>.
    """
    _aiter = source.__aiter__()
    try:
        while True:
            try:
                chunk = await _aiter.__anext__()
            except StopAsyncIteration:
                return
            except Exception as e:
                raise SourceReadError("byte source failed", e) from e
            yield chunk
    finally:
        if inspect.isasyncgen(_aiter):
            await _aiter.aclose()
