"""Setup configuration for the abbrlink generator."""

from setuptools import find_namespace_packages, setup

setup(
    name="abbrlink",
    version="0.2.0",
    description="Assign short, unique hash-based abbrlinks to Markdown documents",
    author="Abbrlink Team",
    python_requires=">=3.10",
    packages=find_namespace_packages(include=["core", "utils"]),
    py_modules=["cli", "config"],
    install_requires=[
        "click>=8.1.0",
        "pydantic>=2.0.0",
        "pyyaml>=6.0",
        "filelock>=3.12.0",
        "tqdm>=4.66.0",
        "coloredlogs>=15.0",
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.12.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
            "isort>=5.12.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "abbrlink=cli:cli",
        ],
    },
)
