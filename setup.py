#!/usr/bin/env python
# -*- coding: utf-8 -*-

import os
from setuptools import setup, find_packages


def read(fname):
    with open(os.path.join(os.path.dirname(__file__), fname)) as fileobj:
        return fileobj.read()


meta = {}
exec(read("shardfs/__meta__.py"), meta)

readme = read("README.rst")
changes = read("CHANGES.rst")


setup(
    name=meta["__title__"],
    version=meta["__version__"],
    url=meta["__url__"],
    license=meta["__license__"],
    author=meta["__author__"],
    author_email=meta["__email__"],
    description=meta["__summary__"],
    long_description=readme + "\n\n" + changes,
    long_description_content_type="text/x-rst",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=meta["__install_requires__"],
    extras_require={"test": meta["__tests_require__"]},
    keywords="hash file system content addressable storage shard zip",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python",
        "License :: OSI Approved :: MIT License",
        "Topic :: Software Development :: Libraries",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Topic :: System :: Archiving :: Compression",
        "Topic :: System :: Filesystems",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
    ],
)
