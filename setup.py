from __future__ import annotations

from pathlib import Path

from setuptools import find_packages, setup

# Read README for long description
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    # Package metadata
    name="journalq",
    version="1.0.0",
    author="Justin Koufopoulos",
    author_email="justin@example.com",
    description="Health metrics, insights and scores from free-text journal entries",
    long_description=long_description,
    long_description_content_type="text/markdown",
    # Package discovery
    packages=find_packages(include=["journalq", "journalq.*"]),
    package_data={"journalq.llm.prompts": ["*.txt"]},
    include_package_data=True,
    # Dependencies
    install_requires=[
        "fastapi>=0.104.1",
        "uvicorn>=0.24.0",
        "pydantic>=2.5.0",
        "cachetools>=5.5.0",
        "tenacity>=8.2.0",
        "python-dotenv>=1.0.0",
        "google-cloud-aiplatform>=1.38.0",
        "google-generativeai>=0.3.0",
        "google-api-core>=2.11.0",
    ],
    # Optional dependencies (for development)
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "httpx>=0.25.0",
            "black>=23.0.0",
            "mypy>=1.0.0",
            "ruff>=0.1.0",
        ],
    },
    # CLI commands
    entry_points={
        "console_scripts": [
            "journalq-api=journalq.api.app:main",
        ],
    },
    # Python version requirement
    python_requires=">=3.11",
    # PyPI classifiers
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
