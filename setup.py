"""Setup script for the slung-load trajectory planner."""

from setuptools import find_packages, setup

setup(
    name="slung-load-planner",
    version="0.1.0",
    description="Hybrid taut/slack trajectory generation for a quadrotor carrying a cable-suspended load",
    author="VIP Research Team",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.10",
    install_requires=[
        "numpy>=2.0.0",
        "cvxpy>=1.5.0",
        "clarabel>=0.7.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
            "black>=23.0.0",
            "ruff>=0.1.0",
            "mypy>=1.0.0",
        ],
    },
)
