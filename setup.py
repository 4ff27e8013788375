from setuptools import find_packages, setup

setup(
    name="nanofai",
    version="0.1.0",
    description="Read length and sequencing time statistics for nanopore FASTA index files",
    packages=find_packages(include=["nanofai", "nanofai.*"]),
    python_requires=">=3.9",
    install_requires=[
        "click",
        "loguru",
        "numpy>=1.22",
        "pandas>=2.0",
        "pydantic>=2",
        "pyyaml",
        "scipy",
        "tabulate",
        "xopen",
    ],
    extras_require={"test": ["pytest"]},
    entry_points={"console_scripts": ["nanofai=nanofai.cli:cli"]},
)
