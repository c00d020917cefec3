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

import logging
from pathlib import Path

import pytest

from stream_ingest.config import settings

logger = logging.getLogger(__name__)


@pytest.fixture
def tmp_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Redirect the temporary files of stream_ingest into a per-test folder."""
    _tmp_dir = tmp_path / "stream_ingest_tmp"
    _tmp_dir.mkdir()
    monkeypatch.setattr(settings, "TMP_DIR", str(_tmp_dir))
    return _tmp_dir
