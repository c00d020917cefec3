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

import pytest

from stream_ingest.buffering import buffer_stream
from stream_ingest.config import settings
from stream_ingest.errors import MaxLengthExceeded, SourceReadError
from tests.utils import TrackedSource


async def test_buffer_stream_exactness():
    _source = TrackedSource([b"ab", b"cd", b"ef"])
    assert await buffer_stream(_source) == b"abcdef"
    assert _source.pulled == 3


async def test_buffer_stream_accepts_bytearray():
    _source = TrackedSource([bytearray(b"ab"), b"cd"])
    _res = await buffer_stream(_source, 4)
    assert _res == b"abcd"
    assert isinstance(_res, bytes)


async def test_buffer_stream_source_reuses_buffer():
    async def _reusing_source():
        buf = bytearray(2)
        for _data in (b"ab", b"cd", b"ef"):
            buf[:] = _data
            yield buf

    assert await buffer_stream(_reusing_source()) == b"abcdef"
    assert await buffer_stream(_reusing_source(), 6) == b"abcdef"


@pytest.mark.parametrize("max_length", (0, None))
async def test_buffer_stream_no_limit(max_length):
    _chunks = [b"x" * 1024] * 64
    assert await buffer_stream(TrackedSource(_chunks), max_length) == b"x" * 65536


async def test_buffer_stream_empty_source():
    assert await buffer_stream(TrackedSource([]), 15) == b""


async def test_buffer_stream_limit_exceeded():
    _source = TrackedSource([b"a" * 10, b"b" * 10, b"c" * 10])

    with pytest.raises(MaxLengthExceeded) as exc_info:
        await buffer_stream(_source, 15)

    assert exc_info.value.max_length == 15
    # fails right after the second chunk, the third chunk is never pulled
    assert _source.pulled == 2
    assert _source.closed


async def test_buffer_stream_exactly_at_limit():
    _source = TrackedSource([b"a" * 10, b"b" * 5])
    assert await buffer_stream(_source, 15) == b"a" * 10 + b"b" * 5


async def test_buffer_stream_limit_breach_wins_over_later_error():
    _source = TrackedSource(
        [b"a" * 10, b"b" * 10], error=ConnectionResetError("peer reset")
    )
    with pytest.raises(MaxLengthExceeded):
        await buffer_stream(_source, 15)


async def test_buffer_stream_error_before_breach():
    _error = ConnectionResetError("peer reset")
    _source = TrackedSource([b"a" * 10], error=_error)

    with pytest.raises(SourceReadError) as exc_info:
        await buffer_stream(_source, 15)
    assert exc_info.value.cause is _error


async def test_buffer_stream_negative_max_length():
    with pytest.raises(ValueError):
        await buffer_stream(TrackedSource([b"a"]), -1)


async def test_buffer_stream_default_limit_from_settings(
    monkeypatch: pytest.MonkeyPatch,
):
    monkeypatch.setattr(settings, "DEFAULT_MAX_BUFFER_LENGTH", 3)

    with pytest.raises(MaxLengthExceeded) as exc_info:
        await buffer_stream(TrackedSource([b"ab", b"cd"]))
    assert exc_info.value.max_length == 3

    # explicitly set 0 to disable the limit
    assert await buffer_stream(TrackedSource([b"ab", b"cd"]), 0) == b"abcd"
