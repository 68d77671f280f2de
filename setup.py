from __future__ import annotations

from setuptools import find_namespace_packages, setup


def _packages() -> list[str]:
    return find_namespace_packages(where="src", include=["optviz", "optviz.*"])


setup(
    name="optviz",
    version="0.1.0",
    description="Streaming parser and summaries for compiler optimization-remark logs.",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=_packages(),
    install_requires=[
        "polars>=0.20",
        "pyarrow>=14",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
)
