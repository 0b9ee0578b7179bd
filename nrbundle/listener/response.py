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

"""Listener run for each outgoing response, after the application."""

import logging

from nrbundle.api.events import request_attribute
from nrbundle.api.html_insertion import insert_browser_timing, is_html_content_type

_logger = logging.getLogger(__name__)

TEMPLATE_EXTENSION_KEY = "nrbundle.template_extension"


def _is_streaming(response):
    # Don't flatten a streamed response. Doing so would buffer what is
    # potentially a very large response in memory contrary to what the
    # application wanted by streaming it in the first place.

    app_iter = getattr(response, "app_iter", None)

    return response.content_length is None and app_iter is not None and not isinstance(app_iter, (list, tuple))


class ResponseListener(object):
    def __init__(self, interactor, instrument=False, http_cache=False, template_extension=None):
        self.interactor = interactor
        self.instrument = instrument
        self.http_cache = http_cache
        self.template_extension = template_extension

    def _extension(self, request):
        if self.template_extension is not None:
            return self.template_extension

        environ = getattr(request, "environ", None) or {}

        return environ.get(TEMPLATE_EXTENSION_KEY)

    def send_custom_data(self, config):
        if config is None:
            return

        for name, value in config.drain_custom_metrics().items():
            self.interactor.add_custom_metric(str(name), float(value))

        for name, value in config.drain_custom_parameters().items():
            self.interactor.add_custom_parameter(str(name), value)

        for name, events in config.drain_custom_events().items():
            for attributes in events:
                self.interactor.add_custom_event(str(name), attributes)

    def on_response(self, event):
        if not event.is_main_request():
            return

        self.send_custom_data(event.config)

        if self.http_cache:
            self.interactor.end_transaction()

        if self.instrument:
            self.insert_browser_timing(event)

    def on_error(self, event):
        """Called in place of on_response() when the application raised
        an exception and there is no response.

        """

        if not event.is_main_request():
            return

        self.send_custom_data(event.config)

        if self.http_cache:
            self.interactor.end_transaction()

    def on_finish(self, event):
        if not event.is_main_request():
            return

        self.interactor.finish_transaction()

    def insert_browser_timing(self, event):
        # The agent's own insertion is turned off as the header and
        # footer are inserted here, or by the template.

        self.interactor.disable_auto_rum()

        request = event.request
        response = event.response

        # Some requests might not want to get instrumented.

        if not request_attribute(request, "_instrument", True):
            return

        if not is_html_content_type(response.headers.get("Content-Type")):
            return

        if _is_streaming(response):
            return

        content = response.body

        if not content:
            return

        header = self.interactor.get_browser_timing_header
        footer = self.interactor.get_browser_timing_footer

        extension = self._extension(request)

        if extension is not None and extension.is_used():
            if extension.is_header_called():
                header = None
            if extension.is_footer_called():
                footer = None

        content = insert_browser_timing(content, header, footer, response.charset or "utf-8")

        if content is None:
            return

        # Null the original first to avoid holding two copies of the
        # content in memory while the new one is set.

        response.body = b""
        response.body = content

        _logger.debug("Inserted browser timing into response for %r.", getattr(request, "path_info", None))
