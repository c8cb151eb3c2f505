from setuptools import setup, find_packages
import re

# Read version from __init__.py
with open("codeforge/__init__.py", encoding="utf-8") as f:
    content = f.read()
    version_match = re.search(r"__version__\s*=\s*['\"]([^'\"]+)['\"]", content)
    if not version_match:
        raise RuntimeError("Unable to find version string in codeforge/__init__.py")
    version = version_match.group(1)

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="codeforge",
    version=version,
    description="Turns natural-language requests into validated, optimized source files.",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(include=["codeforge", "codeforge.*"]),
    package_data={"codeforge.infrastructure.validation.validators": ["config.yml"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "sqlalchemy>=2.0.4,<2.1.0",
        "python-dotenv>=1.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "openai>=1.57.4",
        "groq>=0.13.1",
        "click>=8.0.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7.0.0"],
    },
    entry_points={
        "console_scripts": [
            "codeforge=codeforge.cli.main:cli",
        ],
    },
)
