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

import re
import sys
from pathlib import Path

import nrbundle
from nrbundle.admin import command, usage

LICENSE_KEY_PLACEHOLDER = "*** REPLACE ME ***"

# Only the first assignment, the one in the [nrbundle] section, is replaced.

_APP_NAME_SETTING = re.compile(r"^app_name = .*$", re.MULTILINE)


def config_template():
    return (Path(nrbundle.__file__).parent / "nrbundle.ini").read_text()


def render_config(license_key, app_name=None):
    content = config_template().replace(LICENSE_KEY_PLACEHOLDER, license_key)

    if app_name:
        content = _APP_NAME_SETTING.sub("app_name = %s" % app_name, content, count=1)

    return content


@command(
    "generate-config",
    "license_key [output_file [app_name]]",
    """Generates a configuration file for <license_key>, written to
<output_file> or to stdout when it is omitted or '-'. The application
name reported for transactions is set to <app_name> when given.""",
)
def generate_config(args):
    if not args or len(args) > 3:
        usage("generate-config")
        sys.exit(1)

    license_key = args[0]
    output_file = args[1] if len(args) > 1 else "-"
    app_name = args[2] if len(args) > 2 else None

    content = render_config(license_key, app_name)

    if output_file == "-":
        print(content)
    else:
        Path(output_file).write_text(content)
