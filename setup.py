from setuptools import setup, find_packages

setup(
    name="sms-core",
    version="0.1.0",
    description="Safety risk scoring, SPI evaluation and compliance alerting for flight-training organizations",
    author="Sumit Asthana",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    py_modules=["cli", "sms_service"],
    package_data={"config": ["*.yaml"]},
    python_requires=">=3.10",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "structlog>=23.0",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "pytest-cov>=4.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sms-core=cli:main",
        ],
    },
)
