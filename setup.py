# setup.py
from setuptools import setup, find_packages

setup(
    name="ypbank",
    version="0.1.0",
    description="Convert and compare bank transaction records in CSV, text and binary formats",
    packages=find_packages(include=["ypbank", "ypbank.*"]),
    python_requires=">=3.8",
    install_requires=[
        "click>=7.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "ypbank=ypbank.cli:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
