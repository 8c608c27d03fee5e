"""Package setup for pfsense_control."""

from setuptools import setup, find_packages

setup(
    name="pfsense-control",
    version="1.0.0",
    description="Session handling, page parsing and form replay for the pfSense web UI",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests>=2.31.0",
        "beautifulsoup4>=4.12.0",
        "lxml>=5.0.0",
        "urllib3>=2.0.0",
        "colorlog>=6.8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "requests-mock>=1.11.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pfsense-control=pfsense_control.cli:main",
        ],
    },
)
