#!/usr/bin/env python

# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License. See LICENSE in the project root
# for license information.

import os
import sys

import setuptools


sys.path.insert(0, os.path.join(os.path.dirname(os.path.abspath(__file__)), "src"))
import understudy

del sys.path[0]


with open("DESCRIPTION.md", "r") as fh:
    long_description = fh.read()


if __name__ == "__main__":
    setuptools.setup(
        name="understudy",
        version=understudy.__version__,
        description="Injectable test doubles with stubs, spies and ordered expectations",
        long_description=long_description,
        long_description_content_type="text/markdown",
        license="MIT",
        python_requires=">=3.8",
        classifiers=[
            "Development Status :: 4 - Beta",
            "Programming Language :: Python :: 3.8",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Framework :: Pytest",
            "Topic :: Software Development :: Testing :: Mocking",
            "License :: OSI Approved :: MIT License",
        ],
        package_dir={"": "src"},
        packages=setuptools.find_namespace_packages(where="src", include=["understudy*"]),
        extras_require={
            "tests": ["pytest", "pytest-timeout"],
        },
    )
