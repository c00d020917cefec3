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


class BaseStreamIngestError(Exception): ...


class UnsupportedAlgorithm(BaseStreamIngestError, ValueError):
    """Raised before any IO when the hash algorithm is not in the allow-list."""

    def __init__(self, algorithm: str) -> None:
        self.algorithm = algorithm
        super().__init__(f"unsupported hash algorithm: {algorithm!r}")


class MaxLengthExceeded(BaseStreamIngestError):
    """Raised when the buffered stream grows beyond <max_length> bytes."""

    def __init__(self, max_length: int) -> None:
        self.max_length = max_length
        super().__init__(f"maximum length of {max_length} bytes exceeded")


class _WrappedIOError(BaseStreamIngestError):
    def __init__(self, msg: str, cause: BaseException) -> None:
        self.cause = cause
        super().__init__(f"{msg}: {cause!r}")


class SourceReadError(_WrappedIOError):
    """Raised when the byte source reports an error."""


class DestinationWriteError(_WrappedIOError):
    """Raised when writing to the destination file fails."""
