# setup.py
from setuptools import setup, find_packages

setup(
    name="feed_scout",
    version="0.1.0",
    description="Асинхронный поиск RSS/Atom/JSON фидов FeedScout",
    packages=find_packages(exclude=["tests", "tests.*"]),  # автоматически найдёт папку feed_scout
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "lxml>=5.0",
        "pydantic>=2.5",
        "PyYAML>=6.0",
        "click>=8.1",
        "tldextract>=5.1",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "feed-scout=feed_scout.cli:cli",
        ],
    },
    python_requires=">=3.11",
)
