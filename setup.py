"""
Setup script for cv-export project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="cv-export",
    version="0.3.0",
    packages=find_packages(include=["cv_export", "cv_export.*", "export_service"]),
    py_modules=["version"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "playwright>=1.40",
        "reportlab>=4.0",
        "python-docx>=1.1",
        "Pillow>=10.0",
        "requests>=2.31",
        "tenacity>=8.2",
        "json-repair>=0.25",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "httpx>=0.26",
            "pypdf>=4.0",
        ],
    },
)
