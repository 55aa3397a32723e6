"""Setup configuration for raidguard."""

from setuptools import setup, find_packages

setup(
    name="raidguard",
    version="0.1.0",
    description="Raid detection and command rollback for ERLC moderation bots",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.11",
    install_requires=[
        "py-cord>=2.4",
        "PyYAML>=6.0",
        "prompt_toolkit>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
)
