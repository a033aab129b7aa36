#!/usr/bin/env python
# -*- coding: utf-8 -*-
import re

from setuptools import find_packages, setup

pkg_name = "ipygather"


def read_file(fname):
    with open(fname, "r", encoding="utf8") as f:
        return f.read()


def read_version():
    match = re.search(
        r'^__version__ = "([^"]+)"', read_file(f"{pkg_name}/version.py"), re.M
    )
    if match is None:
        raise RuntimeError("unable to find version string")
    return match.group(1)


history = read_file("HISTORY.rst")
requirements = read_file("requirements.txt").strip().split()

setup(
    name=pkg_name,
    version=read_version(),
    description="Gather the code behind a notebook cell's results into a standalone script.",
    long_description=read_file("README.md") + "\n\n" + history,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["test", "test.*"]),
    include_package_data=True,
    install_requires=requirements,
    extras_require={
        "test": ["pytest", "hypothesis", "coverage"],
    },
    python_requires=">=3.8",
    license="BSD-3-Clause",
    zip_safe=False,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: BSD License",
        "Natural Language :: English",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)

# python setup.py sdist bdist_wheel
# twine upload dist/*
