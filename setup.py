import re

from setuptools import setup, find_packages

with open("requirements.txt") as f:
    install_requires = f.read().strip().split("\n")

# get version from __version__ variable in payroll_engine/__init__.py
with open("payroll_engine/__init__.py") as f:
    version = re.search(r'^__version__ = "([^"]+)"', f.read(), re.M).group(1)

setup(
    name="payroll_engine",
    version=version,
    description="Payroll Engine - Perhitungan BPJS & PPh 21 untuk payroll Indonesia",
    author="IMOGI",
    author_email="hello@imogi.tech",
    packages=find_packages(exclude=["tests", "scripts"]),
    zip_safe=False,
    include_package_data=True,
    package_data={"payroll_engine.config": ["rule_tables.json"]},
    python_requires=">=3.8",
    install_requires=install_requires,
    extras_require={"test": ["pytest>=7"]},
)
