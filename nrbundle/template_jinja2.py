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

"""Jinja2 support for placing the browser timing header and footer in a
template rather than having them inserted into the response. An extension
instance is created for each request by the middleware and placed in the
WSGI environ, from where the response listener checks whether the template
already rendered the header or footer::

    extension = environ["nrbundle.template_extension"]
    template.render(extension.template_globals(), **context)

and in the template::

    <head>{{ newrelic_browser_timing_header() }}...</head>
    <body>...{{ newrelic_browser_timing_footer() }}</body>

"""

from markupsafe import Markup

HEADER_FUNCTION = "newrelic_browser_timing_header"
FOOTER_FUNCTION = "newrelic_browser_timing_footer"


class BrowserTimingExtension(object):
    def __init__(self, interactor, config=None, instrument=False):
        self.interactor = interactor
        self.config = config
        self.instrument = instrument
        self._header_called = False
        self._footer_called = False

    def _prepare_interactor(self):
        if self.instrument:
            self.interactor.disable_auto_rum()

        if self.config is None:
            return

        for name, value in self.config.drain_custom_metrics().items():
            self.interactor.add_custom_metric(str(name), float(value))

        for name, value in self.config.drain_custom_parameters().items():
            self.interactor.add_custom_parameter(str(name), value)

    def browser_timing_header(self):
        if self._header_called:
            raise RuntimeError('Function "%s" has already been called.' % HEADER_FUNCTION)

        self._prepare_interactor()
        self._header_called = True

        return Markup(self.interactor.get_browser_timing_header())

    def browser_timing_footer(self):
        if self._footer_called:
            raise RuntimeError('Function "%s" has already been called.' % FOOTER_FUNCTION)

        self._prepare_interactor()
        self._footer_called = True

        return Markup(self.interactor.get_browser_timing_footer())

    def is_header_called(self):
        return self._header_called

    def is_footer_called(self):
        return self._footer_called

    def is_used(self):
        return self._header_called or self._footer_called

    def template_globals(self):
        return {
            HEADER_FUNCTION: self.browser_timing_header,
            FOOTER_FUNCTION: self.browser_timing_footer,
        }

    def install(self, environment):
        """Registers the functions as globals of a jinja2.Environment. As
        the extension tracks a single request this is only suitable for an
        environment created for that request, otherwise pass the result of
        template_globals() when rendering.

        """

        environment.globals.update(self.template_globals())
        return environment
