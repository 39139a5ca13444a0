# Copyright 2018 The LibRec Authors. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ============================================================================


"""
Release instruction:
    - Check that tests run correctly.
    - Change __version__ in setup.py and librec/__init__.py.
    - Build and upload the source distribution and wheel to PyPI.
"""


import os
import shutil
from setuptools import Command, setup, find_packages


with open("README.md", "r") as fh:
    long_description = fh.read()


class CleanCommand(Command):
    description = "Remove build artifacts from the source tree"

    user_options = []

    def initialize_options(self):
        pass

    def finalize_options(self):
        pass

    def run(self):
        if os.path.exists("build"):
            shutil.rmtree("build")
        for dirpath, dirnames, filenames in os.walk("librec"):
            for filename in filenames:
                if os.path.splitext(filename)[1] == ".pyc":
                    os.unlink(os.path.join(dirpath, filename))

            for dirname in dirnames:
                if dirname == "__pycache__":
                    shutil.rmtree(os.path.join(dirpath, dirname))


cmdclass = {
    "clean": CleanCommand,
}

setup(
    name="librec",
    version="1.3.0",
    description="Collaborative filtering recommenders with a shared SGD core and evaluation harness",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="Apache-2.0",
    python_requires=">=3.7",
    install_requires=["numpy", "scipy", "tqdm", "docopt"],
    extras_require={"tests": ["pytest"]},
    entry_points={"console_scripts": ["librec=librec.main:main"]},
    cmdclass=cmdclass,
    packages=find_packages(exclude=["tests", "tests.*"]),
)
