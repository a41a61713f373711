#!/usr/bin/env python3
"""
Package definition for audiocd-stream.

Install with: pip install -e .[cdio]
"""

from setuptools import setup, find_packages

setup(
    name="audiocd-stream",
    version="0.1.0",
    description="Seekable PCM streams from audio CDs via libcdio",
    license="MIT",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.5.0",
        "numpy>=1.26.0",
    ],
    extras_require={
        "cdio": ["pycdio>=2.1.0"],
        "test": ["pytest>=7.4"],
    },
)
