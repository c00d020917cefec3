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

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

import anyio

from ingest_common.logging import configure_logging

from .buffering import buffer_stream
from .byte_source import Part, file_source
from .checksum import make_checksum
from .config import HashAlgorithm, settings
from .errors import BaseStreamIngestError
from .http_utils import mime_type
from .persist import stream_to_disk

logger = logging.getLogger(__name__)


async def _checksum(args: argparse.Namespace) -> str:
    return await make_checksum(args.file, args.algorithm)


async def _buffer(args: argparse.Namespace) -> str:
    _buffered = await buffer_stream(file_source(args.file), args.max_length)
    return str(len(_buffered))


async def _persist(args: argparse.Namespace) -> str:
    _fpath = Path(args.file)
    _info = await stream_to_disk(
        Part(
            file_source(_fpath),
            filename=_fpath.name,
            content_type=mime_type(_fpath.name),
        ),
        args.prefix,
        delete_on_failure=args.delete_on_failure,
    )
    return _info.model_dump_json()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stream_ingest",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        description="consume a file as byte stream into digest, buffer or temporary file",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    _checksum_parser = subparsers.add_parser("checksum", help="print the hex digest")
    _checksum_parser.add_argument("file", help="the file to checksum")
    _checksum_parser.add_argument(
        "--algorithm",
        help="hash algorithm to use",
        choices=[str(_alg) for _alg in HashAlgorithm],
        default=str(settings.DEFAULT_HASH_ALGORITHM),
    )
    _checksum_parser.set_defaults(handler=_checksum)

    _buffer_parser = subparsers.add_parser(
        "buffer", help="buffer the file into memory and print its size"
    )
    _buffer_parser.add_argument("file", help="the file to buffer")
    _buffer_parser.add_argument(
        "--max-length",
        help="max bytes to buffer, 0 means no limit",
        type=int,
        default=settings.DEFAULT_MAX_BUFFER_LENGTH,
    )
    _buffer_parser.set_defaults(handler=_buffer)

    _persist_parser = subparsers.add_parser(
        "persist", help="stream the file into a temporary file and print its info"
    )
    _persist_parser.add_argument("file", help="the file to persist")
    _persist_parser.add_argument(
        "--prefix",
        help="prefix of the temporary file name",
        default=settings.TMP_FILE_PREFIX,
    )
    _persist_parser.add_argument(
        "--delete-on-failure",
        help="remove the partially written file on failure",
        action=argparse.BooleanOptionalAction,
        default=settings.DELETE_ON_FAILURE,
    )
    _persist_parser.set_defaults(handler=_persist)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    configure_logging(
        settings.LOG_LEVEL_TABLE, default_level=settings.DEFAULT_LOG_LEVEL
    )
    args = _build_parser().parse_args(argv)
    try:
        print(anyio.run(args.handler, args))
    except BaseStreamIngestError as e:
        logger.error(f"{args.command} {args.file} failed: {e!r}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
