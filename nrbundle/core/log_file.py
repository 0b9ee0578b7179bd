# Copyright 2010 New Relic, Inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""This module sets up use of the Python logging module by the bundle. As we
don't want to rely exclusively on user having configured the logging module
themselves to capture any logged output we attach our own log file when
enabled from configuration. We also provide ability to fallback to using
stdout or stderr.

"""

import logging
import sys
import threading

import nrbundle.core.config

_lock = threading.Lock()

_bundle_logger = logging.getLogger("nrbundle")
_bundle_logger.addHandler(logging.NullHandler())

_LOG_FORMAT = "%(asctime)s (%(process)d/%(threadName)s) %(name)s %(levelname)s - %(message)s"

_initialized = False


def _attach_handler(handler, level):
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    _bundle_logger.addHandler(handler)
    _bundle_logger.setLevel(level)
    return handler


def initialize(settings=None):
    global _initialized

    if _initialized:
        return

    with _lock:
        if _initialized:
            return

        if settings is None:
            settings = nrbundle.core.config.global_settings()

        if settings.log_file == "stdout":
            _attach_handler(logging.StreamHandler(sys.stdout), settings.log_level)
            _bundle_logger.debug("Initializing nrbundle stdout logging.")

        elif settings.log_file == "stderr":
            _attach_handler(logging.StreamHandler(sys.stderr), settings.log_level)
            _bundle_logger.debug("Initializing nrbundle stderr logging.")

        elif settings.log_file:
            try:
                _attach_handler(logging.FileHandler(settings.log_file), settings.log_level)

                _bundle_logger.debug("Initializing nrbundle logging.")
                _bundle_logger.debug('Log file "%s".', settings.log_file)

            except Exception:
                _attach_handler(logging.StreamHandler(sys.stderr), settings.log_level)

                _bundle_logger.exception('Unable to create log file "%s".', settings.log_file)

                _bundle_logger.debug("Initializing nrbundle stderr logging.")

        _initialized = True
