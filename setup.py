#!/usr/bin/env python3
"""Setup script for contactgraph."""

import pathlib
from setuptools import setup, find_packages

HERE = pathlib.Path(__file__).parent

# Read version from VERSION file
version_file = HERE / "VERSION"
with open(version_file, 'r', encoding='utf-8') as f:
    version = f.read().strip()

# Read README for long description
with open(HERE / "README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Read requirements
with open(HERE / "requirements.txt", "r", encoding="utf-8") as fh:
    requirements = [
        line.strip()
        for line in fh
        if line.strip() and not line.startswith("#") and not line.startswith("-")
    ]

setup(
    name="contactgraph",
    version=version,
    description="contactgraph - GraphQL contact directory with live subscriptions",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["contactgraph", "contactgraph.*"]),
    py_modules=["cgapi"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
        "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
    ],
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.25",
        ],
    },
    entry_points={
        "console_scripts": [
            "contactgraph-api=cgapi:main",
        ],
    },
    include_package_data=True,
)
