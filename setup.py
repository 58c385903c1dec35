"""Setup configuration for quarterly_connection"""

from setuptools import setup, find_packages

setup(
    name="quarterly-connection",
    version="0.1.0",
    description=(
        "CLI tool for quarterly connection reports: Jira tickets resolved and "
        "GitHub pull requests, issues and reviews, rendered as HTML."
    ),
    author="Quarterly Connection Contributors",
    author_email="",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    package_data={"quarterly_connection": ["templates/*.j2"]},
    include_package_data=True,
    install_requires=[
        "requests>=2.28.0",
        "PyYAML>=6.0",
        "Jinja2>=3.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "black>=22.0",
            "flake8>=4.0",
            "mypy>=0.950",
        ],
    },
    entry_points={
        "console_scripts": [
            "qc=quarterly_connection.main:main",
        ],
    },
)
