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
"""Constants and runtime configurable settings for stream_ingest."""


from __future__ import annotations

import logging
from typing import Dict, Optional

from pydantic import BaseModel, BeforeValidator, Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing_extensions import Annotated

from ingest_common._typing import LogLevel, StrEnum, gen_strenum_validator

logger = logging.getLogger(__name__)

ENV_PREFIX = "STREAM_INGEST_"


class HashAlgorithm(StrEnum):
    """The allow-list of hash algorithms for checksum computing."""

    MD5 = "md5"
    SHA1 = "sha1"
    SHA224 = "sha224"
    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"
    SHA3_256 = "sha3_256"
    SHA3_512 = "sha3_512"
    BLAKE2B = "blake2b"
    BLAKE2S = "blake2s"


class Config:
    # ------ io config ------ #
    CHUNK_SIZE = 64 * 1024  # 64KiB

    # ------ checksum ------ #
    DEFAULT_HASH_ALGORITHM = HashAlgorithm.MD5

    # ------ tmp file naming ------ #
    TMP_NAME_SEPARATOR = "-"
    TMP_NAME_DATE_FORMAT = "%Y%m%d"
    TMP_NAME_RANDOM_BITS = 64
    # checked in order, the first one pointing to a directory wins
    TMP_DIR_ENVS = ("TMPDIR", "TEMP", "TMP")


class IngestSettings(BaseModel):
    #
    # ------ logging settings ------ #
    #
    DEFAULT_LOG_LEVEL: LogLevel = "INFO"
    LOG_LEVEL_TABLE: Dict[str, LogLevel] = {
        "ingest_common": "INFO",
        "stream_ingest": "INFO",
    }

    #
    # ------ stream consuming settings ------ #
    #
    DEFAULT_HASH_ALGORITHM: Annotated[
        HashAlgorithm, BeforeValidator(gen_strenum_validator(HashAlgorithm))
    ] = Config.DEFAULT_HASH_ALGORITHM
    # 0 means no limit
    DEFAULT_MAX_BUFFER_LENGTH: int = Field(default=0, ge=0)
    READ_CHUNK_SIZE: int = Field(default=Config.CHUNK_SIZE, gt=0)

    #
    # ------ temporary file settings ------ #
    #
    TMP_FILE_PREFIX: str = ""
    # if not set, the platform temporary directory is resolved on each call
    TMP_DIR: Optional[str] = None
    # whether to remove the partially written file when persisting fails
    DELETE_ON_FAILURE: bool = False


def load_settings() -> IngestSettings:
    """Parse the settings from environment variables prefixed with <ENV_PREFIX>.

    Falls back to the default settings if parsing fails.
    """
    try:

        class _SettingParser(IngestSettings, BaseSettings):
            model_config = SettingsConfigDict(
                validate_default=True,
                env_prefix=ENV_PREFIX,
            )

        _parsed_setting = _SettingParser()
        return IngestSettings.model_construct(**_parsed_setting.model_dump())
    except Exception as e:
        logger.error(f"failed to parse stream_ingest settings: {e!r}")
        logger.warning("use default settings ...")
        return IngestSettings()


config = Config()
settings = load_settings()
