"""
Setup configuration for timeline-dep-graph package
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="timeline-dep-graph",
    version="1.0.0",
    author="Your Name",
    author_email="your.email@example.com",
    description="Incremental rendering engine for hierarchical task dependency timelines",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/timeline-dep-graph",
    packages=find_packages(include=["timeline_dep_graph", "timeline_dep_graph.*"]),
    py_modules=["run_demo"],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Libraries",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.11",
    install_requires=[
        "python-dotenv>=1.0.0",
    ],
    extras_require={
        "langfuse": [
            "langfuse>=2.0.0",
        ],
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "timeline-dep-graph-demo=run_demo:main",
        ],
    },
)
