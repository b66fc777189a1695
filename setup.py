# setup.py
from setuptools import setup, find_packages

setup(
    name="book2pdf",
    version="0.1.0",
    description="Turn a published GitBook/Docusaurus website into PDFs for offline reading",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"book2pdf": ["templates/*.j2"]},
    install_requires=[
        "click>=8.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "beautifulsoup4>=4.12",
        "Jinja2>=3.1",
        "playwright>=1.40",
        "pypdf>=4.0",
        "python-slugify>=8.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
            "aiohttp>=3.9",
        ],
    },
    entry_points={
        "console_scripts": [
            "book2pdf=book2pdf.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
