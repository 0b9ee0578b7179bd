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

import sys

_builtin_plugins = [
    "generate_config",
    "record_deploy",
    "validate_config",
]

_commands = {}


def command(name, options="", description="", hidden=False):
    def wrapper(callback):
        callback.name = name
        callback.options = options
        callback.description = description
        callback.hidden = hidden
        _commands[name] = callback
        return callback

    return wrapper


def usage(name):
    details = _commands[name]
    print("Usage: nrbundle-admin %s %s" % (name, details.options))


@command("help", "[command]", hidden=True)
def help(args):
    if not args:
        print("Usage: nrbundle-admin command [options]")
        print()
        print("Type 'nrbundle-admin help <command>' for help on a specific command.")
        print()
        print("Available commands are:")

        for name in sorted(_commands.keys()):
            details = _commands[name]
            if not details.hidden:
                print(" ", name)

    else:
        name = args[0]

        if name not in _commands:
            print("Unknown command '%s'." % name, end=" ")
            print("Type 'nrbundle-admin help' for usage.")

        else:
            details = _commands[name]

            print("Usage: nrbundle-admin %s %s" % (name, details.options))
            if details.description:
                print()
                print(details.description)


def load_internal_plugins():
    for name in _builtin_plugins:
        module_name = "%s.%s" % (__name__, name)
        __import__(module_name)


def main(argv=None):
    if argv is None:
        argv = sys.argv

    if len(argv) > 1:
        command = argv[1]
    else:
        command = "help"

    callback = _commands.get(command)

    if callback is None:
        print("Unknown command '%s'." % command, end=" ")
        print("Type 'nrbundle-admin help' for usage.")
        sys.exit(1)

    callback(argv[2:])


load_internal_plugins()

if __name__ == "__main__":
    main()
