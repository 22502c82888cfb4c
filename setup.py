# Copyright © 2025 Leadpoet

import re
import os
import codecs
from os import path
from io import open
from setuptools import setup, find_packages


here = path.abspath(path.dirname(__file__))

with open(path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

with codecs.open(os.path.join(here, "verification_worker/__init__.py"), encoding="utf-8") as init_file:
    version_match = re.search(r"^__version__ = ['\"]([^'\"]*)['\"]", init_file.read(), re.M)
    if not version_match:
        raise RuntimeError("Unable to find version string in verification_worker/__init__.py")
    version_string = version_match.group(1)


requirements = [
    # HTTP and networking
    "aiohttp>=3.9.5",

    # Monitoring and logging
    "structlog>=23.2.0",

    # Environment and configuration
    "python-dotenv>=1.0.0",

    # Web framework
    "starlette>=0.30.0",
    "pydantic>=2.0.0",
    "fastapi>=0.110.0",
    "uvicorn[standard]>=0.38.0",

    # Supabase (lead store + verification batches)
    "supabase>=2.0.0",
]

test_requirements = [
    "pytest>=8.0.0",
    "pytest-cov>=4.1.0",
    "pytest-asyncio>=0.21.0",
    "httpx>=0.27.0",
]

setup(
    name="leadpoet_verification_worker",
    version=version_string,
    description="Bulk email verification reconciliation worker for LeadPoet campaigns",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/leadpoet/leadpoet",
    author="Leadpoet",
    author_email="hello@leadpoet.com",
    license="MIT",
    packages=find_packages(include=['verification_worker', 'verification_worker.*']),
    include_package_data=True,
    python_requires=">=3.10",
    install_requires=requirements,
    extras_require={
        "test": test_requirements,
    },
    entry_points={
        "console_scripts": [
            "verification-worker=verification_worker.main:main",
        ]
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Internet :: WWW/HTTP",
    ],
)
