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

"""Interactors are the single point through which the listeners talk to the
agent. The listeners never call the agent API directly, which allows the
agent to be swapped for a no-op implementation where it isn't running, or
wrapped so that each call is logged.

"""

import logging
import threading

import newrelic.agent
from newrelic.api.web_transaction import WebTransaction

_logger = logging.getLogger(__name__)


class NewRelicInteractor(object):
    """Capability interface of the agent as used by the listeners."""

    def set_application_name(self, name, license_key=None, xmit=False):
        raise NotImplementedError

    def set_transaction_name(self, name):
        raise NotImplementedError

    def ignore_transaction(self):
        raise NotImplementedError

    def ignore_apdex(self):
        raise NotImplementedError

    def start_transaction(self, name=None):
        raise NotImplementedError

    def end_transaction(self):
        raise NotImplementedError

    def finish_transaction(self):
        raise NotImplementedError

    def add_custom_metric(self, name, value):
        raise NotImplementedError

    def add_custom_parameter(self, name, value):
        raise NotImplementedError

    def add_custom_event(self, name, attributes):
        raise NotImplementedError

    def notice_error(self, exc_info):
        raise NotImplementedError

    def set_background_job(self, flag=True):
        raise NotImplementedError

    def disable_auto_rum(self):
        raise NotImplementedError

    def get_browser_timing_header(self):
        raise NotImplementedError

    def get_browser_timing_footer(self):
        raise NotImplementedError


class AgentInteractor(NewRelicInteractor):
    """Forwards to the Python agent API. Calls made when there is no
    current transaction are ignored by the agent itself.

    """

    def __init__(self):
        self._local = threading.local()

    @property
    def _started(self):
        return getattr(self._local, "transaction", None)

    def _application_name(self):
        return getattr(self._local, "app_name", None) or newrelic.agent.global_settings().app_name

    def set_application_name(self, name, license_key=None, xmit=False):
        # The agent binds a transaction to an application when the
        # transaction starts. Activating the application registers it
        # with the collector without blocking so that transactions
        # started later report against it.

        if not name or name == newrelic.agent.global_settings().app_name:
            return

        self._local.app_name = name
        newrelic.agent.application(name).activate()

    def set_transaction_name(self, name):
        newrelic.agent.set_transaction_name(name)

    def ignore_transaction(self):
        newrelic.agent.ignore_transaction()

    def ignore_apdex(self):
        newrelic.agent.suppress_apdex_metric()

    def _exit_started(self):
        transaction = self._started

        if transaction is None:
            return False

        self._local.transaction = None
        transaction.__exit__(None, None, None)

        return True

    def start_transaction(self, name=None):
        # A transaction started here for an earlier request on this
        # thread which was never finished is exited first.

        self._exit_started()

        # Where the application is already wrapped by the agent there
        # is a current transaction and nothing more is required.

        if newrelic.agent.current_transaction() is not None:
            return

        application = newrelic.agent.application(name or self._application_name())
        transaction = WebTransaction(application, None)
        transaction.__enter__()

        self._local.transaction = transaction

    def end_transaction(self):
        if not self._exit_started():
            newrelic.agent.end_of_transaction()

    def finish_transaction(self):
        # Only a transaction started by start_transaction() is exited.
        # One the agent started around the application is left to it.

        self._exit_started()

    def add_custom_metric(self, name, value):
        newrelic.agent.record_custom_metric(name, value)

    def add_custom_parameter(self, name, value):
        newrelic.agent.add_custom_attribute(name, value)

    def add_custom_event(self, name, attributes):
        newrelic.agent.record_custom_event(name, attributes)

    def notice_error(self, exc_info):
        newrelic.agent.notice_error(exc_info)

    def set_background_job(self, flag=True):
        newrelic.agent.set_background_task(flag)

    def disable_auto_rum(self):
        newrelic.agent.disable_browser_autorum()

    def get_browser_timing_header(self):
        return newrelic.agent.get_browser_timing_header()

    def get_browser_timing_footer(self):
        # Recent agents emit the complete loader from the header and no
        # longer provide a footer.

        footer = getattr(newrelic.agent, "get_browser_timing_footer", None)

        if footer is None:
            return ""

        return footer()


class BlackholeInteractor(NewRelicInteractor):
    """Used where the agent is not running so application code and the
    listeners can make the same calls regardless.

    """

    def set_application_name(self, name, license_key=None, xmit=False):
        pass

    def set_transaction_name(self, name):
        pass

    def ignore_transaction(self):
        pass

    def ignore_apdex(self):
        pass

    def start_transaction(self, name=None):
        pass

    def end_transaction(self):
        pass

    def finish_transaction(self):
        pass

    def add_custom_metric(self, name, value):
        pass

    def add_custom_parameter(self, name, value):
        pass

    def add_custom_event(self, name, attributes):
        pass

    def notice_error(self, exc_info):
        pass

    def set_background_job(self, flag=True):
        pass

    def disable_auto_rum(self):
        pass

    def get_browser_timing_header(self):
        return ""

    def get_browser_timing_footer(self):
        return ""


class LoggingInteractor(NewRelicInteractor):
    """Logs each call at debug level before passing it on."""

    def __init__(self, interactor, logger=None):
        self._interactor = interactor
        self._logger = logger or _logger

    def set_application_name(self, name, license_key=None, xmit=False):
        self._logger.debug("Setting New Relic application name to %s.", name)
        self._interactor.set_application_name(name, license_key, xmit)

    def set_transaction_name(self, name):
        self._logger.debug("Setting New Relic transaction name to %s.", name)
        self._interactor.set_transaction_name(name)

    def ignore_transaction(self):
        self._logger.debug("Ignoring transaction.")
        self._interactor.ignore_transaction()

    def ignore_apdex(self):
        self._logger.debug("Ignoring apdex.")
        self._interactor.ignore_apdex()

    def start_transaction(self, name=None):
        self._logger.debug("Starting a new New Relic transaction for application %s.", name)
        self._interactor.start_transaction(name)

    def end_transaction(self):
        self._logger.debug("Ending a New Relic transaction.")
        self._interactor.end_transaction()

    def finish_transaction(self):
        self._logger.debug("Finishing New Relic transaction started for the request.")
        self._interactor.finish_transaction()

    def add_custom_metric(self, name, value):
        self._logger.debug("Adding custom New Relic metric %s: %s.", name, value)
        self._interactor.add_custom_metric(name, value)

    def add_custom_parameter(self, name, value):
        self._logger.debug("Adding custom New Relic parameter %s: %s.", name, value)
        self._interactor.add_custom_parameter(name, value)

    def add_custom_event(self, name, attributes):
        self._logger.debug("Adding custom New Relic event %s: %r.", name, attributes)
        self._interactor.add_custom_event(name, attributes)

    def notice_error(self, exc_info):
        self._logger.debug("Sending exception to New Relic: %r.", exc_info[1])
        self._interactor.notice_error(exc_info)

    def set_background_job(self, flag=True):
        self._logger.debug("Setting New Relic background job to %s.", flag)
        self._interactor.set_background_job(flag)

    def disable_auto_rum(self):
        self._logger.debug("Disabling New Relic auto RUM.")
        self._interactor.disable_auto_rum()

    def get_browser_timing_header(self):
        self._logger.debug("Getting New Relic browser timing header.")
        return self._interactor.get_browser_timing_header()

    def get_browser_timing_footer(self):
        self._logger.debug("Getting New Relic browser timing footer.")
        return self._interactor.get_browser_timing_footer()


def agent_active():
    settings = newrelic.agent.global_settings()
    return bool(settings.enabled and settings.license_key)


def adaptive_interactor(real=None, fake=None):
    """Returns an interactor which talks to the agent where it is enabled
    and has a license key, and otherwise one which discards everything.

    """

    if agent_active():
        interactor = real or AgentInteractor()
    else:
        interactor = fake or BlackholeInteractor()

    _logger.debug("Using %s for New Relic interaction.", type(interactor).__name__)

    return interactor
