"""Setup configuration for certprep-sampler package."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="certprep-sampler",
    version="0.1.0",
    author="certprep Team",
    description="Weighted question sampling and scoring for certification practice exams",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Education",
        "Topic :: Education :: Testing",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.9",
    install_requires=[
        "plotly>=5.0.0",
        "python-dotenv>=1.0.0",
        "aiohttp>=3.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "certprep-generate=certprep.generate:cli_main",
            "certprep-score=certprep.score:cli_main",
            "certprep-bundle=certprep.bundle:cli_main",
            "certprep-analyze=certprep.analyze:cli_main",
        ],
    },
)
