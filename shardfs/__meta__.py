# -*- coding: utf-8 -*-
"""Define project metadata
"""

__title__ = "shardfs"
__summary__ = "Content-addressable sharded file storage with safe zip archives."
__url__ = "https://github.com/shardfs/shardfs"

__version__ = "0.1.0"

__install_requires__ = [
    "fs>=2.4.16",
    # fs declares its namespace through pkg_resources.
    "setuptools<81",
    "httpx>=0.27",
    "python-magic>=0.4.27",
]
__tests_require__ = ["pytest", "hypothesis"]

__author__ = "shardfs contributors"
__email__ = "shardfs@users.noreply.github.com"

__license__ = "MIT License"
