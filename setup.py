# setup.py
from setuptools import setup, find_packages

setup(
    name="webgrep",
    version="0.1.0",
    description="Ограниченный веб-краулер для поиска ключевого слова WebGrep",
    packages=find_packages(exclude=("tests", "tests.*")),
    package_data={"webgrep": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "jinja2>=3.1",
        "lxml>=4.9",
        "pydantic>=2.5",
        "pypdf>=4.0",
        "python-docx>=1.1",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "webgrep=webgrep.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
