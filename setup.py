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

import os

from setuptools import setup

script_directory = os.path.dirname(__file__)
if not script_directory:
    script_directory = os.getcwd()

readme_file = os.path.join(script_directory, "README.rst")

packages = [
    "nrbundle",
    "nrbundle.admin",
    "nrbundle.api",
    "nrbundle.common",
    "nrbundle.core",
    "nrbundle.listener",
]

classifiers = [
    "Development Status :: 5 - Production/Stable",
    "License :: OSI Approved :: Apache Software License",
    "Programming Language :: Python :: 3.8",
    "Programming Language :: Python :: 3.9",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: Implementation :: CPython",
    "Topic :: System :: Monitoring",
]

kwargs = dict(
    name="nrbundle",
    version="1.0.0",
    description="New Relic request and response listeners for WSGI applications",
    long_description=open(readme_file).read(),
    license="Apache-2.0",
    zip_safe=False,
    classifiers=classifiers,
    packages=packages,
    python_requires=">=3.8",
    package_data={
        "nrbundle": ["nrbundle.ini"],
    },
    install_requires=[
        "newrelic",
        "WebOb",
        "MarkupSafe",
        "requests",
    ],
    extras_require={
        "test": ["pytest", "WebTest", "Jinja2"],
    },
    entry_points={
        "console_scripts": ["nrbundle-admin = nrbundle.admin:main"],
        "paste.filter_app_factory": ["main = nrbundle.config:filter_app_factory"],
    },
)

setup(**kwargs)
