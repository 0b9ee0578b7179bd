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

"""This module provides a structure to hang the configuration settings. We
use an empty class structure and manually populate it. The global defaults
are taken from environment variables where one exists for a setting and will
be overlaid with any settings from the local configuration file when
nrbundle.config.initialize() is called.

"""

import logging
import os

# The Settings objects and the global default settings. We create a
# distinct type for each sub category of settings so that an error when
# accessing a non existant setting is more descriptive and identifies
# the category of settings.


class Settings(object):
    def __repr__(self):
        return repr(self.__dict__)


class BrowserMonitoringSettings(Settings):
    pass


class TransactionNameSettings(Settings):
    pass


class DeploymentSettings(Settings):
    pass


_LOG_LEVEL = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}

_INTERACTORS = ("auto", "agent", "blackhole")


def _environ_as_bool(name, default=False):
    flag = os.environ.get(name, default)
    if default is None or default:
        try:
            flag = not flag.lower() in ["off", "false", "0"]
        except AttributeError:
            pass
    else:
        try:
            flag = flag.lower() in ["on", "true", "1"]
        except AttributeError:
            pass
    return flag


def _environ_as_log_level(name, default=logging.INFO):
    level = os.environ.get(name, None)
    if level is None:
        return default
    return _LOG_LEVEL.get(level.upper(), default)


def _environ_as_set(name, default=""):
    value = os.environ.get(name, default)
    return value.split()


def _default_settings():
    settings = Settings()

    settings.browser_monitoring = BrowserMonitoringSettings()
    settings.transaction_name = TransactionNameSettings()
    settings.deployment = DeploymentSettings()

    settings.enabled = _environ_as_bool("NRBUNDLE_ENABLED", default=True)

    settings.app_name = os.environ.get("NEW_RELIC_APP_NAME", "Python Application")
    settings.license_key = os.environ.get("NEW_RELIC_LICENSE_KEY", None)
    settings.api_key = os.environ.get("NEW_RELIC_API_KEY", None)
    settings.xmit = False

    settings.interactor = os.environ.get("NRBUNDLE_INTERACTOR", "auto")
    settings.logging = _environ_as_bool("NRBUNDLE_LOGGING", default=False)

    settings.log_file = os.environ.get("NRBUNDLE_LOG", None)
    settings.log_level = _environ_as_log_level("NRBUNDLE_LOG_LEVEL")

    # Whether the response listener performs manual insertion of the
    # browser timing header and footer into HTML responses.

    settings.browser_monitoring.instrument = _environ_as_bool("NRBUNDLE_INSTRUMENT", default=False)

    # Set when an HTTP reverse cache sits in front of the application
    # and the transaction is bracketed explicitly by the listeners.

    settings.http_cache = _environ_as_bool("NRBUNDLE_HTTP_CACHE", default=False)

    settings.transaction_name.naming = os.environ.get("NRBUNDLE_TRANSACTION_NAMING", "uri")
    settings.transaction_name.ignored_routes = _environ_as_set("NRBUNDLE_IGNORED_ROUTES")
    settings.transaction_name.ignored_paths = _environ_as_set("NRBUNDLE_IGNORED_PATHS")

    settings.deployment.names = []
    settings.deployment.api_host = os.environ.get("NRBUNDLE_API_HOST", "api.newrelic.com")
    settings.deployment.timeout = 30.0

    return settings


_settings = _default_settings()


def global_settings():
    """This returns the default global settings. Generally only used
    directly in test scripts and test harnesses or when applying global
    settings from the configuration file. Being the default global
    settings, you should not use this to access settings when processing
    a request. Instead pass the settings object around explicitly.

    """

    return _settings


def valid_interactor(name):
    return name in _INTERACTORS


def flatten_settings(settings):
    """This returns dictionary of settings flattened into a single
    key namespace rather than nested hierarchy.

    """

    def _flatten(settings, o, name=None):
        for key, value in vars(o).items():
            if name:
                key = "%s.%s" % (name, key)

            if isinstance(value, Settings):
                _flatten(settings, value, key)
            else:
                settings[key] = value

        return settings

    return _flatten({}, settings)


def apply_config_setting(settings_object, name, value):
    """Apply a setting to the settings object where name is a dotted path.
    Intermediate settings objects are created for categories that do not
    exist yet.

    """

    target = settings_object
    fields = name.split(".", 1)

    while len(fields) > 1:
        if not hasattr(target, fields[0]):
            setattr(target, fields[0], Settings())
        target = getattr(target, fields[0])
        fields = fields[1].split(".", 1)

    setattr(target, fields[0], value)
