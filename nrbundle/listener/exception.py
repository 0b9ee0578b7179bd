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

import logging

from webob.exc import HTTPException

_logger = logging.getLogger(__name__)


class ExceptionListener(object):
    """Reports exceptions raised by the application to the agent. HTTP
    exceptions are the application deliberately returning an error
    response and are not reported.

    """

    def __init__(self, interactor):
        self.interactor = interactor

    def on_exception(self, event):
        if isinstance(event.exception, HTTPException):
            return

        _logger.debug("Reporting %r raised handling %r.", event.exception, getattr(event.request, "path_info", None))

        self.interactor.notice_error(event.exc_info)
