"""A setuptools setup module for proto_json"""

# Standard
import os

# Third Party
from setuptools import setup

# Read the README to provide the long description
python_base = os.path.abspath(os.path.dirname(__file__))
with open(os.path.join(python_base, "README.md"), "r") as handle:
    long_description = handle.read()

# Read version from the env
version = os.environ.get("RELEASE_VERSION", "0.0.0")

# Read in the requirements
with open(os.path.join(python_base, "requirements.txt"), "r") as handle:
    requirements = handle.read()
with open(os.path.join(python_base, "requirements-test.txt"), "r") as handle:
    test_requirements = handle.read()

setup(
    name="proto-json-stream",
    version=version,
    description="Descriptor-driven conversion between protobuf messages and JSON token streams",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    keywords=["json", "protobuf", "proto", "streaming"],
    packages=["proto_json"],
    install_requires=requirements,
    extras_require={"test": test_requirements},
)
