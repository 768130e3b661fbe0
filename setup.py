"""
Setup.py for lvs.
"""
from setuptools import setup, find_packages

setup(
    name="lvs-scanner",
    version="0.4.0",
    description="Local vulnerability scanner for npm and PyPI dependencies",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    python_requires=">=3.9",
    install_requires=[
        "typer>=0.9",
        "rich>=13.0",
        "httpx>=0.24",
        "pydantic>=2.0",
        "PyYAML>=6.0",
        "tomli>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
            "pytest-mock>=3.10",
        ],
    },
    entry_points={
        "console_scripts": [
            "lvs=lvs.cli:app",
        ],
    },
    zip_safe=False,
)
