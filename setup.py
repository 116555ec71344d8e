"""Setup script for the clinic-portal package following Cosmic Python pattern."""

from setuptools import setup, find_namespace_packages

setup(
    name="clinic-portal",
    version="1.0.0",
    description="Clinic portal backend - requisitions, consents, case status and reports for a genetic-testing lab",
    author="Clinic Portal Team",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["shared*", "case*", "directory*", "supplies*"]),
    py_modules=["config"],
    python_requires=">=3.11",
    install_requires=[
        "fastapi",
        "uvicorn[standard]",
        "pydantic",
        "sqlalchemy>=2.0,<2.1",
        "psycopg2-binary",
        "redis",
        "minio",
        "urllib3",
        "requests",
        "python-multipart",
        "python-jose[cryptography]",
        "email-validator",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-cov",
            "httpx",
            "fakeredis",
        ],
        "dev": [
            "black",
            "flake8",
            "mypy",
            "pre-commit",
        ],
    },
    entry_points={
        "console_scripts": [
            "clinic-portal-api=shared.entrypoints.portal_api:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
    ],
)
