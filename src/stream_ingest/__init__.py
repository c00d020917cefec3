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
"""Bounded, failure-aware consuming of byte streams."""


from __future__ import annotations

import logging

from .buffering import buffer_stream
from .byte_source import ByteSource, NamedPart, Part, file_source
from .checksum import digest_stream, make_checksum
from .config import HashAlgorithm, config, settings
from .errors import (
    BaseStreamIngestError,
    DestinationWriteError,
    MaxLengthExceeded,
    SourceReadError,
    UnsupportedAlgorithm,
)
from .persist import StoredPartInfo, stream_to_disk
from .tmp_path import make_temporary_path

logger = logging.getLogger(__name__)


__all__ = (
    "BaseStreamIngestError",
    "ByteSource",
    "DestinationWriteError",
    "HashAlgorithm",
    "MaxLengthExceeded",
    "NamedPart",
    "Part",
    "SourceReadError",
    "StoredPartInfo",
    "UnsupportedAlgorithm",
    "buffer_stream",
    "config",
    "digest_stream",
    "file_source",
    "make_checksum",
    "make_temporary_path",
    "settings",
    "stream_to_disk",
)
