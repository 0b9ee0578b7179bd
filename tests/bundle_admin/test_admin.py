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

from unittest import mock

import pytest

import nrbundle.admin.record_deploy as record_deploy_module
import nrbundle.config
from nrbundle.admin import main
from nrbundle.admin.generate_config import LICENSE_KEY_PLACEHOLDER, render_config
from nrbundle.admin.record_deploy import record_deployment

CONFIG_FILE = """
[nrbundle]
app_name = Shop
license_key = LICENSE
api_key = API-KEY
deployment.names = Shop Shop-EU
"""


@pytest.fixture(scope="function")
def config_file(tmp_path):
    path = tmp_path / "nrbundle.ini"
    path.write_text(CONFIG_FILE)
    return str(path)


@pytest.fixture(scope="function")
def requests():
    with mock.patch.object(record_deploy_module, "requests") as requests:
        requests.get.return_value.json.return_value = {
            "applications": [{"name": "Shop", "id": 42}, {"name": "Shop-EU", "id": 43}]
        }
        requests.post.return_value.status_code = 201
        requests.post.return_value.json.return_value = {"deployment": {"id": 1}}
        yield requests


def test_help(capsys):
    main(["nrbundle-admin"])

    out = capsys.readouterr().out
    assert "Available commands are:" in out
    assert "generate-config" in out
    assert "record-deploy" in out
    assert "validate-config" in out


def test_help_for_command(capsys):
    main(["nrbundle-admin", "help", "validate-config"])

    out = capsys.readouterr().out
    assert out.startswith("Usage: nrbundle-admin validate-config config_file [environment]")


def test_unknown_command(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["nrbundle-admin", "frobnicate"])

    assert exc.value.code == 1
    assert "Unknown command 'frobnicate'." in capsys.readouterr().out


def test_generate_config_to_file(tmp_path):
    output = tmp_path / "generated.ini"

    main(["nrbundle-admin", "generate-config", "MY-KEY", str(output)])

    content = output.read_text()
    assert "license_key = MY-KEY" in content
    assert "REPLACE ME" not in content


def test_generate_config_to_stdout(capsys):
    main(["nrbundle-admin", "generate-config", "MY-KEY"])

    assert "license_key = MY-KEY" in capsys.readouterr().out


def test_generate_config_application_name(fresh_settings, tmp_path):
    output = tmp_path / "generated.ini"

    main(["nrbundle-admin", "generate-config", "MY-KEY", str(output), "Shop"])

    settings = nrbundle.config.initialize(str(output))

    assert settings.app_name == "Shop"
    assert settings.license_key == "MY-KEY"


def test_generate_config_application_name_to_stdout(capsys):
    main(["nrbundle-admin", "generate-config", "MY-KEY", "-", "Shop"])

    out = capsys.readouterr().out
    assert "app_name = Shop\n" in out
    assert "Python Application" not in out


def test_render_config_keeps_default_application_name():
    content = render_config("MY-KEY")

    assert "app_name = Python Application" in content
    assert LICENSE_KEY_PLACEHOLDER not in content


def test_generate_config_usage(capsys):
    with pytest.raises(SystemExit):
        main(["nrbundle-admin", "generate-config"])

    with pytest.raises(SystemExit):
        main(["nrbundle-admin", "generate-config", "MY-KEY", "-", "Shop", "extra"])

    assert "Usage: nrbundle-admin generate-config" in capsys.readouterr().out


def test_validate_config(fresh_settings, config_file, capsys):
    main(["nrbundle-admin", "validate-config", config_file])

    out = capsys.readouterr().out
    assert "app_name = 'Shop'" in out
    assert "license_key = '****'" in out
    assert "LICENSE" not in out
    assert "transaction_name.naming = 'uri'" in out


@pytest.mark.parametrize("line", ["interactor = telepathy", "transaction_name.naming = nonsense"])
def test_validate_config_invalid(fresh_settings, tmp_path, capsys, line):
    path = tmp_path / "nrbundle.ini"
    path.write_text("[nrbundle]\n%s\n" % line)

    with pytest.raises(SystemExit) as exc:
        main(["nrbundle-admin", "validate-config", str(path)])

    assert exc.value.code == 1
    assert "Configuration is not valid" in capsys.readouterr().out


def test_record_deploy(fresh_settings, config_file, requests, capsys):
    main(["nrbundle-admin", "record-deploy", config_file, "Release", "1.2", "Fixed things", "alice"])

    assert requests.post.call_count == 2

    url = requests.post.call_args_list[0][0][0]
    kwargs = requests.post.call_args_list[0][1]

    assert url == "https://api.newrelic.com/v2/applications/42/deployments.json"
    assert kwargs["json"] == {
        "deployment": {"revision": "1.2", "description": "Release", "changelog": "Fixed things", "user": "alice"}
    }
    assert kwargs["headers"] == {"X-Api-Key": "API-KEY"}
    assert kwargs["timeout"] == 30.0

    assert requests.post.call_args_list[1][0][0] == "https://api.newrelic.com/v2/applications/43/deployments.json"

    out = capsys.readouterr().out
    assert "Recorded deployment of '1.2' for 'Shop'." in out
    assert "Recorded deployment of '1.2' for 'Shop-EU'." in out


def test_record_deploy_usage(capsys):
    with pytest.raises(SystemExit):
        main(["nrbundle-admin", "record-deploy", "nrbundle.ini"])

    assert "Usage: nrbundle-admin record-deploy" in capsys.readouterr().out


def test_record_deployment_unknown_application(fresh_settings, requests):
    with pytest.raises(RuntimeError):
        record_deployment("Elsewhere", fresh_settings, "Release")

    requests.post.assert_not_called()


def test_record_deployment_failure(fresh_settings, requests):
    requests.post.return_value.status_code = 403

    with pytest.raises(RuntimeError):
        record_deployment("Shop", fresh_settings, "Release")
