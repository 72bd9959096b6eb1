"""
gramevo - Grammatical Evolution engine.

Install with: pip install -e .
Development: pip install -e ".[dev]"
"""

from setuptools import find_packages, setup

setup(
    name="gramevo",
    version="0.1.0",
    description="Grammatical evolution with autonomous and ask/tell interactive runs",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    license="MIT",
    python_requires=">=3.10",
    packages=find_packages(include=["gramevo", "gramevo.*"]),
    install_requires=[
        # Numerics
        "numpy>=2.1.0",

        # Configuration & logging
        "pyyaml>=6.0.2",
        "loguru>=0.7.2",

        # Validation
        "pydantic>=2.9.0",

        # Command line
        "click>=8.1.7",
    ],
    extras_require={
        "dev": [
            "pytest>=8.3.0",
            "pytest-cov>=5.0.0",
            "pytest-mock>=3.14.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "gramevo=gramevo.cli.commands:cli",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Scientific/Engineering :: Artificial Intelligence",
    ],
)
