# ---------------------------------------------------------------------
# Gufo ICMP Watch: ICMPv4/ICMPv6 reachability monitor
# Python build
# ---------------------------------------------------------------------
# Copyright (C) 2026, Gufo Labs
# ---------------------------------------------------------------------

# Third-party modules
from setuptools import find_namespace_packages, setup

setup(
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["gufo.*"]),
    package_data={"gufo.icmpwatch": ["py.typed"]},
)
