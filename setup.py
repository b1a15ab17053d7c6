from __future__ import annotations

import os

from setuptools import find_packages, setup

dependencies = [
    "chia_rs>=0.10.0",  # sized ints and bytes32 transaction ids
    "colorlog>=6.8.2",  # Adds color to logs
    "concurrent-log-handler>=0.9.25",  # Concurrently log and rotate logs
    "filelock>=3.13.1",  # For reading and writing config multiprocess and multithread safely  (non-reentrant locks)
    "importlib_resources>=6.1.1",  # Reads the packaged initial config
    "PyYAML>=6.0.1",  # Used for config file format
    "sortedcontainers>=2.4.0",  # For looking up fee rate buckets
    "typing-extensions>=4.10.0",  # typing backports like Protocol and final
]

dev_dependencies = [
    "build>=1.0.3",
    "coverage>=7.4.1",
    "pytest>=8.0.2",
    "pytest-cov>=4.1.0",
    "pytest-xdist>=3.5.0",
    "isort>=5.13.2",
    "flake8>=7.0.0",
    "mypy>=1.8.0",
    "black>=23.12.1",
    "types-pyyaml>=6.0.12.12",
    "types-setuptools>=69.1.0.20240217",
]

kwargs = dict(
    name="smartfee",
    description="Smart fee rate estimation from mempool and block history.",
    license="Apache License",
    python_requires=">=3.10, <4",
    keywords="fee estimation mempool bitcoin",
    install_requires=dependencies,
    extras_require=dict(
        dev=dev_dependencies,
    ),
    packages=find_packages(include=["smartfee", "smartfee.*"]),
    package_data={
        "": ["py.typed"],
        "smartfee.util": ["initial-*.yaml"],
    },
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    zip_safe=False,
)

if len(os.environ.get("SMARTFEE_SKIP_SETUP", "")) < 1:
    setup(**kwargs)  # type: ignore
