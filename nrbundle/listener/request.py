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

"""Listener run for each incoming request, before the application."""

import logging

from nrbundle.api.events import request_attribute
from nrbundle.api.naming import UriNamingStrategy

_logger = logging.getLogger(__name__)


class RequestListener(object):
    def __init__(self, interactor, ignored_routes=(), ignored_paths=(), naming_strategy=None, http_cache=False):
        self.interactor = interactor
        self.ignored_routes = frozenset(ignored_routes or ())
        self.ignored_paths = frozenset(ignored_paths or ())
        self.naming_strategy = naming_strategy or UriNamingStrategy()
        self.http_cache = http_cache

    def on_request(self, event):
        self.set_application_name(event)
        self.set_ignore_transaction(event)
        self.set_transaction_name(event)

    def set_application_name(self, event):
        if not event.is_main_request():
            return

        config = event.config
        name = config.name if config is not None else None

        # The application is activated before any transaction is started
        # so the transaction reports against it.

        if name:
            self.interactor.set_application_name(name, config.license_key, config.xmit)

        # With an HTTP cache in front of the application the transaction
        # is left to be started by the cache layer pass, otherwise it
        # is started here.

        if not self.http_cache:
            self.interactor.start_transaction(name)

    def set_ignore_transaction(self, event):
        if not event.is_main_request():
            return

        request = event.request

        route = request_attribute(request, "_route")
        path = getattr(request, "path_info", None)

        if route in self.ignored_routes or path in self.ignored_paths:
            _logger.debug("Ignoring transaction for route %r and path %r.", route, path)
            self.interactor.ignore_transaction()

    def set_transaction_name(self, event):
        if not event.is_main_request():
            return

        name = self.naming_strategy.get_transaction_name(event.request)

        self.interactor.set_transaction_name(name)
