"""
Setup script for the url-to-pdf project.

Allows development installation with `pip install -e .`
"""

from setuptools import setup, find_packages

setup(
    name="url-to-pdf",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    py_modules=["version"],
    include_package_data=True,
    package_data={"frontend": ["templates/*.html"]},
    python_requires=">=3.11",
    install_requires=[
        "aiosqlite>=0.19",
        "fastapi>=0.110",
        "flask>=3.0",
        "httpx>=0.27",
        "playwright>=1.40",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "python-dotenv>=1.0",
        "uvicorn>=0.27",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "url-to-pdf=url_to_pdf.cli:main",
        ],
    },
)
