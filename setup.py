"""
Setup script for the CognitiveTrust Security Scanner package.
"""

from setuptools import setup, find_packages
import os

# Read the README
readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
if os.path.exists(readme_path):
    with open(readme_path, 'r', encoding='utf-8') as f:
        long_description = f.read()
else:
    long_description = "Security finding scanner with standard and AI-assisted quick fixes."

setup(
    name="cognitivetrust",
    version="1.0.0",
    author="CognitiveTrust Team",
    author_email="security@example.com",
    description="Semgrep and dependency scanning with atomic standard and Gemini-assisted fixes",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/cognitivetrust/cognitivetrust",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "cognitivetrust": ["rules/*.yaml"],
    },
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "pyyaml>=6.0",
        "rich>=13.0",
        "httpx>=0.24",
        "packaging>=21.0",
    ],
    extras_require={
        "semgrep": ["semgrep"],
        "test": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
            "black>=23.0",
            "mypy>=1.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cognitivetrust=cognitivetrust.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Security",
        "Topic :: Software Development :: Quality Assurance",
    ],
    keywords="security, scanner, semgrep, quick-fix, remediation, gemini",
)
