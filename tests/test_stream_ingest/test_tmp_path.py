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

import os
import re
import time
from pathlib import Path

import pytest

from stream_ingest.config import settings
from stream_ingest.tmp_path import get_tmp_dir, make_temporary_path, to_base36

TMP_FNAME_PA = re.compile(
    r"^(?P<prefix>.*?)(?P<date>\d{8})-(?P<pid>\d+)-(?P<counter>\d+)-(?P<random>[0-9a-z]+)$"
)


@pytest.fixture(autouse=True)
def _clean_tmp_dir_envs(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "TMP_DIR", None)
    monkeypatch.setattr(settings, "TMP_FILE_PREFIX", "")
    for _env in ("TMPDIR", "TEMP", "TMP"):
        monkeypatch.delenv(_env, raising=False)


@pytest.mark.parametrize(
    "_in, _expected",
    (
        (0, "0"),
        (35, "z"),
        (36, "10"),
        (2**32, "1z141z4"),
    ),
)
def test_to_base36(_in: int, _expected: str):
    assert to_base36(_in) == _expected
    assert int(_expected, 36) == _in


def test_to_base36_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


@pytest.mark.parametrize("prefix", ("", "upload_", "part-"))
def test_make_temporary_path_naming(tmp_path: Path, monkeypatch, prefix: str):
    monkeypatch.setenv("TMPDIR", str(tmp_path))

    _path = make_temporary_path(prefix)
    assert _path.parent == tmp_path
    assert (_ma := TMP_FNAME_PA.match(_path.name))
    assert _ma.group("prefix") == prefix
    assert _ma.group("date") == time.strftime("%Y%m%d")
    assert int(_ma.group("pid")) == os.getpid()
    assert not _path.exists()


def test_make_temporary_path_prefix_from_settings(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "TMP_FILE_PREFIX", "from_settings_")
    assert make_temporary_path().name.startswith("from_settings_")
    # explicitly specified prefix takes priority
    assert make_temporary_path("explicit_").name.startswith("explicit_")


def test_make_temporary_path_counter_is_monotonic():
    _counters = [
        int(TMP_FNAME_PA.match(make_temporary_path().name).group("counter"))  # type: ignore
        for _ in range(16)
    ]
    assert _counters == sorted(_counters)
    assert len(set(_counters)) == 16


def test_make_temporary_path_uniqueness():
    _count = 10_000
    assert len({make_temporary_path("p") for _ in range(_count)}) == _count


def test_get_tmp_dir_resolved_on_each_call(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
):
    _dir1, _dir2 = tmp_path / "dir1", tmp_path / "dir2"
    _dir1.mkdir()
    _dir2.mkdir()

    monkeypatch.setenv("TMPDIR", str(_dir1))
    assert get_tmp_dir() == _dir1
    monkeypatch.setenv("TMPDIR", str(_dir2))
    assert make_temporary_path().parent == _dir2


def test_get_tmp_dir_skip_invalid_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TMPDIR", str(tmp_path / "not_existed"))
    monkeypatch.setenv("TEMP", str(tmp_path))
    assert get_tmp_dir() == tmp_path


def test_get_tmp_dir_settings_first(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TMPDIR", str(tmp_path))
    monkeypatch.setattr(settings, "TMP_DIR", str(tmp_path / "from_settings"))
    assert get_tmp_dir() == tmp_path / "from_settings"


def test_get_tmp_dir_fallback():
    assert get_tmp_dir().is_dir()
