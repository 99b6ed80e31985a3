# setup.py
from setuptools import setup, find_packages

setup(
    name="upbudget",
    version="0.1.0",
    description="Monthly budget report from Up bank transactions, categorized by keyword",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click>=8.0",
        "pyyaml>=5.3",
        "python-dotenv>=0.19",
        "httpx>=0.24",
        "anyio>=3.6",
    ],
    extras_require={
        "tests": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "upbudget=budget_tracker.cli:main",
            "upbudget-web=budget_tracker.web:main",
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
