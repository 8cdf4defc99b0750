## @file setup.py
# This contains setup info for ntstatusgen pip module
#
##
# Copyright (c) Microsoft Corporation
#
# SPDX-License-Identifier: BSD-2-Clause-Patent
##
import setuptools

from ntstatusgen import TOOL_VERSION

with open("readme.md", "r") as fh:
    long_description = fh.read()


setuptools.setup(
    name="ntstatusgen",
    version=TOOL_VERSION,
    author="ntstatusgen team",
    description="Generate NTSTATUS lookup tables from a status code catalogue",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license='BSD-2-Clause-Patent',
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    python_requires=">=3.9",
    entry_points={
        'console_scripts': ['ntstatusgen=ntstatusgen.ntstatus_tool:main']
    },
    install_requires=[
        'pyyaml>=5.2',
        'edk2-pytool-library>=0.10.13',
    ],
    extras_require={
        'test': ['pytest']
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers"
    ]
)
