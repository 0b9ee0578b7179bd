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

"""Per request holder for the application identity and for custom data
which application code wants reported against the current transaction.

Application code can record custom data at any point while handling the
request, typically via the instance the middleware places in the WSGI
environ::

    config = environ["nrbundle.config"]
    config.add_custom_metric("Custom/Checkout/Items", len(basket))
    config.add_custom_event("WidgetSale", {"color": "red", "weight": 12.5})

Everything recorded is sent to the agent when the response is processed.

"""

ENVIRON_KEY = "nrbundle.config"


class ApplicationConfig(object):
    def __init__(self, name, license_key=None, api_key=None, xmit=False, deployment_names=None):
        self.name = name
        self.license_key = license_key
        self.api_key = api_key
        self.xmit = xmit

        # When no explicit deployment names are given a deployment is
        # recorded against the application name.

        if deployment_names:
            self.deployment_names = list(deployment_names)
        elif name:
            self.deployment_names = [name]
        else:
            self.deployment_names = []

        self._custom_metrics = {}
        self._custom_parameters = {}
        self._custom_events = {}

    @classmethod
    def from_settings(cls, settings):
        return cls(
            settings.app_name,
            license_key=settings.license_key,
            api_key=settings.api_key,
            xmit=settings.xmit,
            deployment_names=settings.deployment.names,
        )

    def __repr__(self):
        return "<%s name=%r metrics=%d parameters=%d events=%d>" % (
            type(self).__name__,
            self.name,
            len(self._custom_metrics),
            len(self._custom_parameters),
            sum(len(events) for events in self._custom_events.values()),
        )

    def add_custom_metric(self, name, value):
        self._custom_metrics[name] = value

    def add_custom_parameter(self, name, value):
        self._custom_parameters[name] = value

    def add_custom_event(self, name, attributes):
        self._custom_events.setdefault(name, []).append(dict(attributes))

    def get_custom_metrics(self):
        return dict(self._custom_metrics)

    def get_custom_parameters(self):
        return dict(self._custom_parameters)

    def get_custom_events(self):
        return {name: list(events) for name, events in self._custom_events.items()}

    # The drain methods return what has been recorded so far and reset
    # the collection, so that data flushed once, whether from a template
    # or when the response is processed, is not sent a second time.

    def drain_custom_metrics(self):
        metrics, self._custom_metrics = self._custom_metrics, {}
        return metrics

    def drain_custom_parameters(self):
        parameters, self._custom_parameters = self._custom_parameters, {}
        return parameters

    def drain_custom_events(self):
        events, self._custom_events = self._custom_events, {}
        return events


def current_config(environ):
    """Returns the buffer for the request described by environ, or None
    where the request is not being handled by the middleware.

    """

    return environ.get(ENVIRON_KEY)
