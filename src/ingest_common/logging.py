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
"""Logging helpers for stream_ingest."""


from __future__ import annotations

import json
import logging
import time
from typing import Mapping

from ingest_common._typing import LogLevel

LOG_FORMAT = json.dumps(
    {
        "timestamp": "%(asctime)s",
        "level": "%(levelname)s",
        "logger": "%(name)s",
        "function": "%(funcName)s",
        "line": "%(lineno)d",
        "message": "%(message)s",
    },
    separators=(",", ":"),
)


class BurstSuppressFilter(logging.Filter):
    """Allow at most <burst_max> records per <burst_round_length> seconds.

    Suppression notices are emitted through <upper_logger_name>, so that
    they are not filtered by this filter itself.
    """

    def __init__(
        self,
        name: str,
        burst_max: int,
        burst_round_length: int,
        upper_logger_name: str | None = None,
    ) -> None:
        super().__init__(name)
        self.upper_logger_name = upper_logger_name
        self.burst_max = burst_max
        self.round_length = burst_round_length

        self._round_start = 0
        self._round_emitted = 0
        self._round_suppressed = 0

    def _start_new_round(self, now: int) -> None:
        if self._round_suppressed:
            logging.getLogger(self.upper_logger_name).warning(
                f"{self._round_suppressed} lines of logging suppressed for logger {self.name} "
                f"from {self._round_start} to {self._round_start + self.round_length}"
            )
        self._round_start = now
        self._round_emitted = self._round_suppressed = 0

    def filter(self, record: logging.LogRecord) -> bool:
        if (now := int(time.time())) > self._round_start + self.round_length:
            self._start_new_round(now)

        if self._round_emitted < self.burst_max:
            self._round_emitted += 1
            return True

        if not self._round_suppressed:
            logging.getLogger(self.upper_logger_name).warning(
                f"logging suppressed for {self.name} until {self._round_start + self.round_length}: "
                f"exceed burst_limit={self.burst_max}"
            )
        self._round_suppressed += 1
        return False


def get_burst_suppressed_logger(
    _logger: logging.Logger | str,
    *,
    upper_logger_name: str | None = None,
    burst_max: int = 6,
    burst_round_length: int = 30,
) -> logging.Logger:
    """Get the logger by <_logger> with a BurstSuppressFilter attached.

    Args:
        _logger (logging.Logger | str): the logger object or the name of the logger.
        upper_logger_name (str | None, optional): the logger to emit suppression notices.
            Defaults to the top-level package logger of <_logger>.
        burst_max (int, optional): how many records can be emitted per round. Defaults to 6.
        burst_round_length (int, optional): the length of one round in seconds. Defaults to 30.
    """
    this_logger = (
        logging.getLogger(_logger) if isinstance(_logger, str) else _logger
    )
    if upper_logger_name is None:
        upper_logger_name = this_logger.name.split(".")[0]

    this_logger.addFilter(
        BurstSuppressFilter(
            this_logger.name,
            upper_logger_name=upper_logger_name,
            burst_max=burst_max,
            burst_round_length=burst_round_length,
        )
    )
    return this_logger


def configure_logging(
    level_table: Mapping[str, LogLevel],
    *,
    default_level: LogLevel = "INFO",
    log_format: str = LOG_FORMAT,
) -> None:
    """Configure the root handler and per-package log levels.

    Loggers not listed in <level_table> inherit <default_level> from the root logger.
    """
    # NOTE: force to reload the basicConfig, for overriding previous setting.
    logging.basicConfig(level=default_level, format=log_format, force=True)
    for logger_name, loglevel in level_table.items():
        logging.getLogger(logger_name).setLevel(loglevel)
