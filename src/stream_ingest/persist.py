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
"""Persist a named byte source into a temporary file."""


from __future__ import annotations

import logging
from contextlib import aclosing
from pathlib import Path
from typing import Optional

from anyio import AsyncFile, CancelScope, open_file
from pydantic import BaseModel, ConfigDict, Field

from ingest_common.logging import get_burst_suppressed_logger

from .byte_source import NamedPart, iter_source
from .config import settings
from .errors import BaseStreamIngestError, DestinationWriteError
from .tmp_path import make_temporary_path

logger = logging.getLogger(__name__)
burst_suppressed_logger = get_burst_suppressed_logger(f"{__name__}.handle_error")


class StoredPartInfo(BaseModel):
    """Describe a persisted part.

    The file at <path> is owned by the caller.
    """

    model_config = ConfigDict(frozen=True)

    path: Path
    name: Optional[str] = None
    content_type: Optional[str] = None
    size: int = Field(ge=0)


async def _close_on_failure(dst: AsyncFile[bytes], fpath: Path) -> None:
    # NOTE: closing flushes buffered data in worker thread, shield it as
    #       the task might be in cancelling.
    try:
        with CancelScope(shield=True):
            await dst.aclose()
    except Exception as e:
        logger.debug(f"failed to close {fpath} on failure: {e!r}")


def _remove_on_failure(fpath: Path) -> None:
    try:
        fpath.unlink(missing_ok=True)
    except OSError as e:
        burst_suppressed_logger.warning(f"failed to remove {fpath}: {e!r}")


async def stream_to_disk(
    part: NamedPart,
    file_prefix: str | None = None,
    *,
    delete_on_failure: bool | None = None,
) -> StoredPartInfo:
    """Write all contents from <part> into a new temporary file.

    Each chunk is written and the write is awaited before the next chunk is
    pulled from <part>, so at most one chunk is in flight.

    The declared filename and content type of <part> are recorded as it,
    without any validation.

    Args:
        part: the named byte source to persist.
        file_prefix: the prefix of the temporary file name. If not specified,
            use the TMP_FILE_PREFIX setting.
        delete_on_failure: whether to remove the partially written file on failure.
            If not specified, use the DELETE_ON_FAILURE setting(defaults to False).

    Returns:
        An inst of StoredPartInfo describing the written file.

    Raises:
        SourceReadError if <part> reports an error.
        DestinationWriteError if failed to open, write or close the temporary file.
    """
    if delete_on_failure is None:
        delete_on_failure = settings.DELETE_ON_FAILURE

    fpath = make_temporary_path(file_prefix)
    dst: AsyncFile[bytes] | None = None
    size = 0
    try:
        try:
            dst = await open_file(fpath, "wb")
        except Exception as e:
            raise DestinationWriteError(f"failed to open {fpath}", e) from e

        async with aclosing(iter_source(part)) as chunks:
            async for chunk in chunks:
                size += len(chunk)
                try:
                    await dst.write(chunk)
                except Exception as e:
                    raise DestinationWriteError(f"failed to write {fpath}", e) from e

        try:
            await dst.aclose()  # flush and close
        except Exception as e:
            raise DestinationWriteError(f"failed to close {fpath}", e) from e
    except BaseException as e:
        if dst is not None:
            await _close_on_failure(dst, fpath)
        if delete_on_failure:
            _remove_on_failure(fpath)
        if isinstance(e, BaseStreamIngestError):
            burst_suppressed_logger.warning(
                f"failed to persist part({part.filename=}) to {fpath}: {e!r}"
            )
        raise

    logger.debug(f"persisted part({part.filename=}) to {fpath}, {size=}")
    return StoredPartInfo(
        path=fpath,
        name=part.filename,
        content_type=part.content_type,
        size=size,
    )
