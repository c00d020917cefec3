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


from __future__ import annotations

import asyncio
import logging
from typing import AsyncGenerator, Iterable

logger = logging.getLogger(__name__)


class TrackedSource:
    """A byte source that records how it is consumed.

    Yields <chunks> in order, and then raises <error> if it is set.
    """

    def __init__(self, chunks: Iterable[bytes], error: BaseException | None = None):
        self.chunks = list(chunks)
        self.error = error
        self.pulled = 0
        self.closed = False

    async def _gen(self) -> AsyncGenerator[bytes]:
        try:
            for chunk in self.chunks:
                await asyncio.sleep(0)
                self.pulled += 1
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True

    def __aiter__(self) -> AsyncGenerator[bytes]:
        return self._gen()


async def stalled_source(first_chunk: bytes) -> AsyncGenerator[bytes]:
    """Yield <first_chunk>, and then never end."""
    yield first_chunk
    await asyncio.Event().wait()
    yield b""  # pragma: no cover
