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
"""Generate names for temporary files.

naming scheme: <prefix><YYYYMMDD>-<pid>-<counter>-<random_base36>

The counter is process-wide and monotonic, the random part takes 64bits
from the OS CSPRNG. The existence of the generated path is never checked.
"""


from __future__ import annotations

import itertools
import os
import secrets
import string
import tempfile
import time
from pathlib import Path

from .config import config as cfg
from .config import settings

_BASE36_ALPHABET = string.digits + string.ascii_lowercase
_name_counter = itertools.count()


def to_base36(value: int) -> str:
    if value < 0:
        raise ValueError(f"{value=} must be non-negative")
    if value == 0:
        return "0"

    digits = []
    while value:
        value, _remainder = divmod(value, 36)
        digits.append(_BASE36_ALPHABET[_remainder])
    return "".join(reversed(digits))


def get_tmp_dir() -> Path:
    """Resolve the temporary directory, re-evaluated on each call.

    Resolving order: TMP_DIR setting, TMPDIR/TEMP/TMP env, and then
    tempfile.gettempdir().
    """
    if settings.TMP_DIR:
        return Path(settings.TMP_DIR)
    for _env in cfg.TMP_DIR_ENVS:
        if (_dir := os.environ.get(_env)) and os.path.isdir(_dir):
            return Path(_dir)
    return Path(tempfile.gettempdir())


def make_temporary_fname(prefix: str | None = None) -> str:
    if prefix is None:
        prefix = settings.TMP_FILE_PREFIX
    sep = cfg.TMP_NAME_SEPARATOR
    return (
        f"{prefix}{time.strftime(cfg.TMP_NAME_DATE_FORMAT)}{sep}{os.getpid()}{sep}"
        f"{next(_name_counter)}{sep}{to_base36(secrets.randbits(cfg.TMP_NAME_RANDOM_BITS))}"
    )


def make_temporary_path(prefix: str | None = None) -> Path:
    """Return a path under the temporary directory for a new temporary file.

    If <prefix> is not specified, the TMP_FILE_PREFIX setting is used.
    """
    return get_tmp_dir() / make_temporary_fname(prefix)
