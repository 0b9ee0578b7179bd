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

"""Strategies for deriving the transaction name from a request."""

from nrbundle.api.events import request_attribute
from nrbundle.common.object_names import callable_name, object_from_name
from nrbundle.core.exceptions import ConfigurationError


class TransactionNamingStrategy(object):
    def get_transaction_name(self, request):
        raise NotImplementedError


class RouteNamingStrategy(TransactionNamingStrategy):
    def get_transaction_name(self, request):
        return request_attribute(request, "_route") or "Unknown Route"


class ControllerNamingStrategy(TransactionNamingStrategy):
    def get_transaction_name(self, request):
        controller = request_attribute(request, "_controller")

        if not controller:
            return "Unknown Controller"

        if isinstance(controller, str):
            return controller

        return callable_name(controller)


class UriNamingStrategy(TransactionNamingStrategy):
    def get_transaction_name(self, request):
        return "%s %s" % (request.method, request.path_info or "/")


class CallableNamingStrategy(TransactionNamingStrategy):
    """Adapts any callable accepting the request and returning a name."""

    def __init__(self, function):
        self._function = function

    def get_transaction_name(self, request):
        return self._function(request)


_strategies = {
    "route": RouteNamingStrategy,
    "controller": ControllerNamingStrategy,
    "uri": UriNamingStrategy,
}


def naming_strategy(name):
    """Returns a strategy instance for one of the builtin names or for a
    'module:object' path to a strategy class, instance or plain callable.

    """

    if name in _strategies:
        return _strategies[name]()

    if ":" not in name:
        raise ConfigurationError("Unknown transaction naming strategy %r." % name)

    try:
        target = object_from_name(name)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError("Unable to import transaction naming strategy %r: %s" % (name, exc))

    if isinstance(target, type) and issubclass(target, TransactionNamingStrategy):
        return target()

    if isinstance(target, TransactionNamingStrategy):
        return target

    if callable(target):
        return CallableNamingStrategy(target)

    raise ConfigurationError("Transaction naming strategy %r is not callable." % name)
