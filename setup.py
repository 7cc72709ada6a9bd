# setup.py
"""
SoW Pulse Package Setup

Install the service:
    pip install -e .

Or for development:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_namespace_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="sow-pulse",
    version="0.1.0",
    author="SoW Pulse Team",
    description="Project coordination dashboard: SoW PDF parsing, Linear sync and Slack milestone notifications",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["src.pulse", "src.pulse.*"]),
    package_data={
        "src.pulse": ["templates/*.html", "static/*.css", "static/*.js"],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Framework :: FastAPI",
    ],
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.100.0",
        "uvicorn>=0.23.0",
        "httpx>=0.24.0",
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "PyYAML>=6.0",
        "APScheduler>=3.10,<4",
        "PyPDF2>=3.0.0",
        "Jinja2>=3.1.0",
        "python-multipart>=0.0.6",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "respx>=0.20.0",  # For mocking httpx
        ],
    },
)
