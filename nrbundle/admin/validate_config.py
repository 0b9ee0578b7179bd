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

from nrbundle.admin import command, usage


@command(
    "validate-config",
    "config_file [environment]",
    """Validates the syntax of <config_file>, optionally applying the
overrides of the section for <environment>, and prints the resulting
settings.""",
)
def validate_config(args):
    import sys

    if len(args) == 0 or len(args) > 2:
        usage("validate-config")
        sys.exit(1)

    from nrbundle.api.naming import naming_strategy
    from nrbundle.config import initialize
    from nrbundle.core.config import flatten_settings
    from nrbundle.core.exceptions import ConfigurationError

    config_file = args[0]
    environment = args[1] if len(args) > 1 else None

    try:
        settings = initialize(config_file, environment, ignore_errors=False)
        naming_strategy(settings.transaction_name.naming)

    except ConfigurationError as exc:
        print("Configuration is not valid: %s" % exc)
        sys.exit(1)

    for name, value in sorted(flatten_settings(settings).items()):
        if name in ("license_key", "api_key") and value:
            value = "****"
        print("%s = %r" % (name, value))
