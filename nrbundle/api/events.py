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

"""Events passed to the listeners at each stage of handling a request.

A main request is the one received from the client. A sub request is one
dispatched internally while handling another, for example to render a
fragment of the page, and is never instrumented separately.

"""

MAIN_REQUEST = 1
SUB_REQUEST = 2


def request_attribute(request, name, default=None):
    """Looks up a routing attribute such as '_route' or '_controller' for
    the request. These are held in the 'wsgiorg.routing_args' keyword
    arguments, exposed by WebOb as request.urlvars.

    """

    try:
        return request.urlvars.get(name, default)
    except (AttributeError, KeyError, TypeError):
        return default


class KernelEvent(object):
    def __init__(self, request, request_type=MAIN_REQUEST, config=None):
        self.request = request
        self.request_type = request_type
        self.config = config

    def is_main_request(self):
        return self.request_type == MAIN_REQUEST


class RequestEvent(KernelEvent):
    pass


class ResponseEvent(KernelEvent):
    def __init__(self, request, response, request_type=MAIN_REQUEST, config=None):
        super(ResponseEvent, self).__init__(request, request_type, config)
        self.response = response


class ExceptionEvent(KernelEvent):
    def __init__(self, request, exc_info, request_type=MAIN_REQUEST, config=None):
        super(ExceptionEvent, self).__init__(request, request_type, config)
        self.exc_info = exc_info

    @property
    def exception(self):
        return self.exc_info[1]
