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

"""WSGI middleware driving the listeners for each request passing through
an application. A nested call, where the application dispatches another
request through the middleware while handling one, is treated as a sub
request and shares the buffer of the request that made it.

"""

import logging
import sys

from webob import Request
from webob.exc import HTTPException

from nrbundle.api.application_config import ENVIRON_KEY, ApplicationConfig
from nrbundle.api.events import MAIN_REQUEST, SUB_REQUEST, ExceptionEvent, RequestEvent, ResponseEvent
from nrbundle.listener.response import TEMPLATE_EXTENSION_KEY
from nrbundle.template_jinja2 import BrowserTimingExtension

_logger = logging.getLogger(__name__)


class BundleMiddleware(object):
    def __init__(
        self,
        application,
        request_listener,
        response_listener,
        exception_listener=None,
        config_factory=None,
        instrument=False,
    ):
        self.application = application
        self.request_listener = request_listener
        self.response_listener = response_listener
        self.exception_listener = exception_listener
        self.config_factory = config_factory or (lambda: ApplicationConfig(None))
        self.instrument = instrument

    def __call__(self, environ, start_response):
        request = Request(environ)

        config = environ.get(ENVIRON_KEY)

        if config is None:
            request_type = MAIN_REQUEST

            config = self.config_factory()
            environ[ENVIRON_KEY] = config

            environ[TEMPLATE_EXTENSION_KEY] = BrowserTimingExtension(
                self.response_listener.interactor, config, self.instrument
            )

        else:
            request_type = SUB_REQUEST

            _logger.debug("Handling %r as a sub request.", request.path_info)

        self.request_listener.on_request(RequestEvent(request, request_type, config))

        try:
            response = self._get_response(request, request_type, config)

            self.response_listener.on_response(ResponseEvent(request, response, request_type, config))

            return response(environ, start_response)

        finally:
            self.response_listener.on_finish(RequestEvent(request, request_type, config))

    def _get_response(self, request, request_type, config):
        try:
            return request.get_response(self.application)

        except Exception as exc:
            event = ExceptionEvent(request, sys.exc_info(), request_type, config)

            if self.exception_listener is not None:
                self.exception_listener.on_exception(event)

            if not isinstance(exc, HTTPException):
                self.response_listener.on_error(event)
                raise

            # An HTTP exception raised by the application is the response.

            return request.get_response(exc)
