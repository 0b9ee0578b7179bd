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

"""This module implements functions for deriving the full name of an object,
used when naming transactions after the view callable handling a request,
and for the reverse, looking up an object from a 'module:object' name given
in configuration.

"""

import functools
import importlib
import sys


def _module_name(object):
    mname = None

    # For the module name we first need to deal with the special
    # case of getset and member descriptors. In this case we
    # grab the module name from the class the descriptor was
    # being used in which is held in __objclass__.

    if hasattr(object, "__objclass__"):
        mname = getattr(object.__objclass__, "__module__", None)

    if mname is None:
        mname = getattr(object, "__module__", None)

    # Builtins or types implemented in C code. For that we need to
    # grab the module name from the __class__.

    if mname is None and hasattr(object, "__class__"):
        mname = getattr(object.__class__, "__module__", None)

    # If the module name isn't in sys.modules it is a generated
    # class of some sort where a fake namespace was used.

    if mname and mname not in sys.modules:
        mname = "<%s>" % mname

    if not mname:
        mname = "<unknown>"

    return mname


def object_context(object):
    """Returns a tuple identifying the supplied object. This will be of
    the form (module, object_path).

    """

    # Partials are named after the function they wrap, which is what
    # a user would expect to see for a view declared that way.

    while isinstance(object, functools.partial):
        object = object.func

    # For functions and methods the __qualname__ attribute gives us
    # the name including the class or outer function it is defined
    # in. If there is none it should mean it is an instance of some
    # sort, in which case we use the name of its class.

    path = getattr(object, "__qualname__", None)

    if path is None and hasattr(object, "__class__"):
        path = getattr(object.__class__, "__qualname__")

    return (_module_name(object), path)


def callable_name(object, separator=":"):
    """Returns a string name identifying the supplied object. This will be
    of the form 'module:object_path'.

    If object were a function, then the name would be 'module:function. If
    a class, 'module:class'. If a member function, 'module:class.function'.

    """

    return separator.join(object_context(object))


def object_from_name(name):
    """Imports and returns the object identified by a name of the form
    'module:object_path'. An ImportError or AttributeError propagates if
    the name cannot be resolved.

    """

    module_name, _, object_path = name.partition(":")

    target = importlib.import_module(module_name)

    if object_path:
        for attribute in object_path.split("."):
            target = getattr(target, attribute)

    return target
