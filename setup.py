"""
Setup script for chapter-lens.

chapter-lens scores a chapter of instructional text against ten
evidence-based learning principles:

1. Concept extraction - a concept graph with mentions, relationships and tiers
2. Principle evaluation - evidence, findings, score and suggestions per principle
3. Reporting - overall score, structure analysis and derived curves

The 'chapterlens' command is the entry point.
"""

from setuptools import find_packages, setup

setup(
    name="chapter-lens",
    version="0.1.0",
    description="Evidence-based pedagogy analysis for instructional chapters",
    long_description=open("README.md", encoding="utf-8").read() if __import__("os").path.exists("README.md") else "",
    long_description_content_type="text/markdown",
    packages=find_packages(include=["chapterlens", "chapterlens.*"]),
    python_requires=">=3.10",
    install_requires=[
        # CLI
        "typer>=0.9.0",
        "rich>=13.0.0",
        # Config & Validation
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        # Logging
        "loguru>=0.7.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "chapterlens=chapterlens.cli.main:run",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: Education",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Topic :: Education",
        "Topic :: Text Processing :: Linguistic",
    ],
    keywords="learning pedagogy instructional-design text-analysis cli education",
)
