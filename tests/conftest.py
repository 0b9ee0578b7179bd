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

import pytest
from testing_support.interactors import recording_interactor

from nrbundle.api.application_config import ApplicationConfig


@pytest.fixture(scope="function")
def interactor():
    return recording_interactor()


@pytest.fixture(scope="function")
def config():
    return ApplicationConfig("App name", license_key="Token")


@pytest.fixture(scope="function")
def fresh_settings(monkeypatch):
    """Reloads the configuration modules so each test starts from the
    defaults taken from the environment, with no configuration file read.

    """

    for name in ("NRBUNDLE_CONFIG_FILE", "NRBUNDLE_ENVIRONMENT", "NEW_RELIC_APP_NAME", "NEW_RELIC_LICENSE_KEY"):
        monkeypatch.delenv(name, raising=False)

    import nrbundle.config as config
    import nrbundle.core.config as core_config

    importlib.reload(core_config)
    importlib.reload(config)

    yield core_config.global_settings()

    importlib.reload(core_config)
    importlib.reload(config)
