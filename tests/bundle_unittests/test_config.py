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

import importlib
import logging
from unittest import mock

import pytest
import webtest
from testing_support.interactors import recording_interactor
from testing_support.sample_applications import html_app

import nrbundle.api.interactor as interactor_module
import nrbundle.config
import nrbundle.core.config
from nrbundle.api.interactor import AgentInteractor, BlackholeInteractor, LoggingInteractor
from nrbundle.api.naming import RouteNamingStrategy
from nrbundle.core.exceptions import ConfigurationError
from nrbundle.middleware import BundleMiddleware

CONFIG_FILE = """
[nrbundle]
app_name = Shop
license_key = LICENSE
log_level = debug
transaction_name.naming = route
transaction_name.ignored_routes = health status
transaction_name.ignored_paths = /ping
deployment.names = Shop Shop-EU

[nrbundle:production]
app_name = Shop (Production)
browser_monitoring.instrument = true
http_cache = true
"""


@pytest.fixture(scope="function")
def config_file(tmp_path):
    path = tmp_path / "nrbundle.ini"
    path.write_text(CONFIG_FILE)
    return str(path)


def test_defaults(fresh_settings):
    assert fresh_settings.enabled is True
    assert fresh_settings.app_name == "Python Application"
    assert fresh_settings.interactor == "auto"
    assert fresh_settings.transaction_name.naming == "uri"
    assert fresh_settings.transaction_name.ignored_routes == []
    assert fresh_settings.browser_monitoring.instrument is False
    assert fresh_settings.http_cache is False


def test_environ_defaults(fresh_settings, monkeypatch):
    monkeypatch.setenv("NRBUNDLE_IGNORED_PATHS", "/ping /health")
    monkeypatch.setenv("NRBUNDLE_INSTRUMENT", "on")
    monkeypatch.setenv("NRBUNDLE_ENABLED", "false")
    monkeypatch.setenv("NRBUNDLE_LOG_LEVEL", "warning")

    importlib.reload(nrbundle.core.config)
    settings = nrbundle.core.config.global_settings()

    assert settings.transaction_name.ignored_paths == ["/ping", "/health"]
    assert settings.browser_monitoring.instrument is True
    assert settings.enabled is False
    assert settings.log_level == logging.WARNING


def test_initialize_reads_file(fresh_settings, config_file):
    settings = nrbundle.config.initialize(config_file)

    assert settings is fresh_settings
    assert settings.config_file == config_file
    assert settings.app_name == "Shop"
    assert settings.license_key == "LICENSE"
    assert settings.log_level == logging.DEBUG
    assert settings.transaction_name.naming == "route"
    assert settings.transaction_name.ignored_routes == ["health", "status"]
    assert settings.transaction_name.ignored_paths == ["/ping"]
    assert settings.deployment.names == ["Shop", "Shop-EU"]
    assert settings.browser_monitoring.instrument is False


def test_environment_overrides(fresh_settings, config_file):
    settings = nrbundle.config.initialize(config_file, "production")

    assert settings.environment == "production"
    assert settings.app_name == "Shop (Production)"
    assert settings.license_key == "LICENSE"
    assert settings.browser_monitoring.instrument is True
    assert settings.http_cache is True


def test_config_file_from_environ(fresh_settings, config_file, monkeypatch):
    monkeypatch.setenv("NRBUNDLE_CONFIG_FILE", config_file)
    monkeypatch.setenv("NRBUNDLE_ENVIRONMENT", "production")

    settings = nrbundle.config.initialize()

    assert settings.app_name == "Shop (Production)"


def test_missing_config_file(fresh_settings, tmp_path):
    with pytest.raises(ConfigurationError):
        nrbundle.config.initialize(str(tmp_path / "missing.ini"))


def test_initialize_twice(fresh_settings, config_file):
    nrbundle.config.initialize(config_file)
    nrbundle.config.initialize(config_file)

    with pytest.raises(ConfigurationError):
        nrbundle.config.initialize(config_file, "production")


def test_invalid_setting_ignored(fresh_settings, tmp_path):
    path = tmp_path / "nrbundle.ini"
    path.write_text("[nrbundle]\ninteractor = telepathy\napp_name = Shop\n")

    settings = nrbundle.config.initialize(str(path))

    assert settings.interactor == "auto"
    assert settings.app_name == "Shop"


def test_invalid_setting_raises(fresh_settings, tmp_path):
    path = tmp_path / "nrbundle.ini"
    path.write_text("[nrbundle]\ninteractor = telepathy\n")

    with pytest.raises(ConfigurationError):
        nrbundle.config.initialize(str(path), ignore_errors=False)


@pytest.mark.parametrize(
    "enabled,name,expected",
    [
        (True, "agent", AgentInteractor),
        (True, "blackhole", BlackholeInteractor),
        (False, "agent", BlackholeInteractor),
    ],
)
def test_build_interactor(fresh_settings, enabled, name, expected):
    fresh_settings.enabled = enabled
    fresh_settings.interactor = name

    assert type(nrbundle.config.build_interactor(fresh_settings)) is expected


@pytest.mark.parametrize("active,expected", [(True, AgentInteractor), (False, BlackholeInteractor)])
def test_build_adaptive_interactor(fresh_settings, active, expected):
    with mock.patch.object(interactor_module, "agent_active", return_value=active):
        interactor = nrbundle.config.build_interactor(fresh_settings)

    assert type(interactor) is expected


def test_build_logging_interactor(fresh_settings):
    fresh_settings.interactor = "blackhole"
    fresh_settings.logging = True

    assert isinstance(nrbundle.config.build_interactor(fresh_settings), LoggingInteractor)


def test_wrap_wsgi_application(fresh_settings, config_file):
    settings = nrbundle.config.initialize(config_file)
    interactor = recording_interactor()

    application = nrbundle.config.wrap_wsgi_application(html_app, interactor=interactor)

    assert isinstance(application, BundleMiddleware)
    assert isinstance(application.request_listener.naming_strategy, RouteNamingStrategy)
    assert application.request_listener.ignored_paths == frozenset(["/ping"])
    assert application.response_listener.instrument is settings.browser_monitoring.instrument

    webtest.TestApp(application).get("/ping")

    interactor.start_transaction.assert_called_once_with("Shop")
    interactor.set_application_name.assert_called_once_with("Shop", "LICENSE", False)
    interactor.ignore_transaction.assert_called_once_with()


def test_filter_app_factory(fresh_settings, config_file):
    application = nrbundle.config.filter_app_factory(html_app, {}, config_file, "production")

    assert isinstance(application, BundleMiddleware)
    assert application.application is html_app
    assert application.instrument is True


def test_agent_transaction_per_request(fresh_settings):
    with mock.patch.object(interactor_module, "newrelic") as newrelic:
        newrelic.agent.current_transaction.return_value = None

        with mock.patch.object(interactor_module, "WebTransaction") as web_transaction:
            application = nrbundle.config.wrap_wsgi_application(html_app, interactor=AgentInteractor())

            app = webtest.TestApp(application)
            app.get("/")
            app.get("/")

    transaction = web_transaction.return_value

    assert transaction.__enter__.call_count == 2
    assert transaction.__exit__.call_count == 2
    newrelic.agent.end_of_transaction.assert_not_called()
