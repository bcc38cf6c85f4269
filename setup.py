from setuptools import setup, find_packages

setup(
    name="time-spine-builder",
    version="0.1.0",
    description="Calendar date spine builder for MetricFlow / dbt",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0.0",
        "click>=8.0.0",
        "jinja2>=3.1.0",
        "sqlparse>=0.4.0",
        "pyyaml>=6.0",
        "jsonschema>=4.0.0",
        "python-dotenv>=1.0.0",
        "SQLAlchemy>=2.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "time-spine=cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Database",
    ],
)
