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

import getpass

import requests

from nrbundle.admin import command, usage
from nrbundle.config import initialize
from nrbundle.core.config import global_settings


def api_request_kwargs(settings):
    api_key = settings.api_key or "NO API KEY WAS SET IN CONFIGURATION"

    return {
        "headers": {"X-Api-Key": api_key},
        "timeout": settings.deployment.timeout,
    }


def fetch_app_id(app_name, settings):
    url = "https://{}/v2/applications.json".format(settings.deployment.api_host)
    r = requests.get(url, params={"filter[name]": app_name}, **api_request_kwargs(settings))
    r.raise_for_status()

    response_json = r.json()
    if "applications" not in response_json:
        return

    for application in response_json["applications"]:
        if application["name"] == app_name:
            return application["id"]


def record_deployment(app_name, settings, description, revision="Unknown", changelog=None, user=None):
    app_id = fetch_app_id(app_name, settings)
    if app_id is None:
        raise RuntimeError(
            "The application named %r was not found in your account. Check that the application "
            "has reported data to New Relic at least once." % app_name
        )

    url = "https://{}/v2/applications/{}/deployments.json".format(settings.deployment.api_host, app_id)

    deployment = {"revision": revision}

    if description:
        deployment["description"] = description
    if changelog:
        deployment["changelog"] = changelog
    if user:
        deployment["user"] = user

    data = {"deployment": deployment}

    r = requests.post(url, json=data, **api_request_kwargs(settings))

    if r.status_code != 201:
        raise RuntimeError(
            "An unexpected HTTP response of %r was received for request made to %r. "
            "The payload for the request was %r. The response payload for the request was %r."
            % (r.status_code, url, data, r.text)
        )

    return r.json()


@command(
    "record-deploy",
    "config_file description [revision changelog user]",
    "Records a deployment against each of the configured deployment names.",
)
def record_deploy(args):
    import sys

    if len(args) < 2:
        usage("record-deploy")
        sys.exit(1)

    def _args(config_file, description, revision="Unknown", changelog=None, user=None, *args):
        return config_file, description, revision, changelog, user

    config_file, description, revision, changelog, user = _args(*args)

    initialize(config_file)

    settings = global_settings()

    if user is None:
        user = getpass.getuser()

    names = settings.deployment.names or [settings.app_name]

    for name in names:
        record_deployment(name, settings, description, revision, changelog, user)
        print("Recorded deployment of %r for %r." % (revision, name))
