"""
protoc-gen-connect-vue - Vue Query bindings for Connect services
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="protoc-gen-connect-vue",
    version="1.0.2",
    description="⚡ Generate TanStack Vue Query composables for Connect services",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"connectvue": ["templates/*.jinja"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "jinja2>=3.1",
        "protobuf>=4.21",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=23.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "connectvue=connectvue.cli:cli_main",
            "protoc-gen-connect-vue=connectvue.plugin:main",
        ],
    },
    keywords="protoc, protobuf, connect, vue, tanstack-query, code-generator",
)
