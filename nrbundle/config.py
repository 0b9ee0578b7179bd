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

import configparser
import logging
import os
import threading

import nrbundle.core.config
import nrbundle.core.log_file
from nrbundle.api.application_config import ApplicationConfig
from nrbundle.api.interactor import AgentInteractor, BlackholeInteractor, LoggingInteractor, adaptive_interactor
from nrbundle.api.naming import naming_strategy
from nrbundle.core.exceptions import ConfigurationError
from nrbundle.listener.exception import ExceptionListener
from nrbundle.listener.request import RequestListener
from nrbundle.listener.response import ResponseListener
from nrbundle.middleware import BundleMiddleware

__all__ = ["initialize", "wrap_wsgi_application", "filter_app_factory"]

_logger = logging.getLogger(__name__)

_SECTION = "nrbundle"

# Names of configuration file and deployment environment. This
# will be overridden by the load_configuration() function when
# configuration is loaded.

_config_file = None
_environment = None
_ignore_errors = True

# This is the actual internal settings object. Options which
# are read from the configuration file will be applied to this.

_settings = nrbundle.core.config.global_settings()

# Use the raw config parser as we want to avoid interpolation
# within values.

_config_object = configparser.RawConfigParser()

# Cache of the parsed global settings found in the configuration
# file. We cache these so can dump them out to the log file once
# all the settings have been read.

_cache_object = []

_configuration_done = False
_configuration_lock = threading.Lock()

# Define some mapping functions to convert raw values read from
# configuration file into the internal types expected by the
# internal configuration settings object.

_LOG_LEVEL = {
    "CRITICAL": logging.CRITICAL,
    "ERROR": logging.ERROR,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


def _map_log_level(s):
    return _LOG_LEVEL[s.upper()]


def _map_split_strings(s):
    return s.split()


def _map_interactor(s):
    if not nrbundle.core.config.valid_interactor(s):
        raise ValueError("Unknown interactor %r." % s)
    return s


def _reset_configuration_done():
    global _configuration_done
    _configuration_done = False


def _raise_configuration_error(section, option):
    _logger.error("CONFIGURATION ERROR")
    _logger.error("Section = %s", section)
    _logger.error("Option = %s", option)
    _logger.exception("Exception Details")

    if not _ignore_errors:
        raise ConfigurationError(
            'Invalid configuration for option "%s" in section "%s". '
            "Check the log file for further details." % (option, section)
        )


def _process_setting(section, option, getter, mapper):
    try:
        # The type of a value is dictated by the getter
        # function supplied.

        value = getattr(_config_object, getter)(section, option)

        # The getter parsed the value okay but want to
        # pass this through a mapping function to change
        # it to internal value suitable for internal
        # settings object. This is usually one where the
        # value was a string.

        if mapper:
            value = mapper(value)

        nrbundle.core.config.apply_config_setting(_settings, option, value)

        # Cache the configuration so can be dumped out to
        # log file when whole main configuration has been
        # processed. This ensures that the log file and log
        # level entries have been set.

        _cache_object.append((option, value))

    except configparser.NoSectionError:
        pass

    except configparser.NoOptionError:
        pass

    except Exception:
        _raise_configuration_error(section, option)


# Processing of all the settings for specified section except
# for log file and log level which are applied separately to
# ensure they are set as soon as possible.


def _process_configuration(section):
    _process_setting(section, "enabled", "getboolean", None)
    _process_setting(section, "app_name", "get", None)
    _process_setting(section, "license_key", "get", None)
    _process_setting(section, "api_key", "get", None)
    _process_setting(section, "xmit", "getboolean", None)
    _process_setting(section, "interactor", "get", _map_interactor)
    _process_setting(section, "logging", "getboolean", None)
    _process_setting(section, "http_cache", "getboolean", None)
    _process_setting(section, "browser_monitoring.instrument", "getboolean", None)
    _process_setting(section, "transaction_name.naming", "get", None)
    _process_setting(section, "transaction_name.ignored_routes", "get", _map_split_strings)
    _process_setting(section, "transaction_name.ignored_paths", "get", _map_split_strings)
    _process_setting(section, "deployment.names", "get", _map_split_strings)
    _process_setting(section, "deployment.api_host", "get", None)
    _process_setting(section, "deployment.timeout", "getfloat", None)


def _load_configuration(config_file=None, environment=None, ignore_errors=True):
    global _config_file
    global _environment
    global _ignore_errors

    # Check whether initialisation has been done previously. If
    # it has then raise a configuration error if it was against
    # a different configuration. Otherwise just return. We don't
    # check at this time if an incompatible configuration has
    # been read from a different sub interpreter.

    if _configuration_done:
        if _config_file != config_file or _environment != environment:
            raise ConfigurationError(
                "Configuration has already been done against differing configuration file or environment. "
                'Prior configuration file used was "%s" and environment "%s".' % (_config_file, _environment)
            )
        return

    _config_file = config_file
    _environment = environment
    _ignore_errors = ignore_errors

    # If no configuration file then nothing more to be done.

    if not config_file:
        _logger.debug("no configuration file, settings from environment")

        nrbundle.core.log_file.initialize(_settings)

        return

    _logger.debug("loading configuration file %r", config_file)

    # Now read in the configuration file. Cache the config file
    # name in internal settings object as indication of succeeding.

    if not _config_object.read([config_file]):
        raise ConfigurationError("Unable to open configuration file %s." % config_file)

    _settings.config_file = config_file

    # Must process log file entries first so that errors with
    # the remainder will get logged if log file is defined.

    _process_setting(_SECTION, "log_file", "get", None)

    if environment:
        _process_setting("%s:%s" % (_SECTION, environment), "log_file", "get", None)

    _process_setting(_SECTION, "log_level", "get", _map_log_level)

    if environment:
        _process_setting("%s:%s" % (_SECTION, environment), "log_level", "get", _map_log_level)

    nrbundle.core.log_file.initialize(_settings)

    # Now process the remainder of the global configuration
    # settings.

    _process_configuration(_SECTION)

    # And any overrides specified with a section corresponding
    # to a specific deployment environment.

    if environment:
        _settings.environment = environment
        _process_configuration("%s:%s" % (_SECTION, environment))

    # Log the configuration now that all settings have been read.

    for option, value in _cache_object:
        _logger.debug("agent config %s = %s", option, repr(value))


def initialize(config_file=None, environment=None, ignore_errors=True):
    """Loads settings from the configuration file, falling back to the
    NRBUNDLE_CONFIG_FILE and NRBUNDLE_ENVIRONMENT environment variables.

    """

    global _configuration_done

    if config_file is None:
        config_file = os.environ.get("NRBUNDLE_CONFIG_FILE", None)

    if environment is None:
        environment = os.environ.get("NRBUNDLE_ENVIRONMENT", None)

    with _configuration_lock:
        _load_configuration(config_file, environment, ignore_errors)
        _configuration_done = True

    return _settings


def build_interactor(settings=None):
    settings = settings or _settings

    if not settings.enabled or settings.interactor == "blackhole":
        interactor = BlackholeInteractor()
    elif settings.interactor == "agent":
        interactor = AgentInteractor()
    else:
        interactor = adaptive_interactor()

    if settings.logging:
        interactor = LoggingInteractor(interactor)

    return interactor


def wrap_wsgi_application(application, settings=None, interactor=None):
    """Wraps a WSGI application with the middleware, configured from the
    supplied settings or the global settings.

    """

    settings = settings or _settings
    interactor = interactor or build_interactor(settings)

    instrument = settings.browser_monitoring.instrument

    request_listener = RequestListener(
        interactor,
        ignored_routes=settings.transaction_name.ignored_routes,
        ignored_paths=settings.transaction_name.ignored_paths,
        naming_strategy=naming_strategy(settings.transaction_name.naming),
        http_cache=settings.http_cache,
    )

    response_listener = ResponseListener(interactor, instrument=instrument, http_cache=settings.http_cache)

    exception_listener = ExceptionListener(interactor)

    _logger.debug(
        "Wrapping %r using %s, instrument=%s, http_cache=%s.",
        application,
        type(interactor).__name__,
        instrument,
        settings.http_cache,
    )

    return BundleMiddleware(
        application,
        request_listener,
        response_listener,
        exception_listener,
        config_factory=lambda: ApplicationConfig.from_settings(settings),
        instrument=instrument,
    )


def filter_app_factory(app, global_conf, config_file, environment=None):
    initialize(config_file, environment)
    return wrap_wsgi_application(app)
