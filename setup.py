from __future__ import annotations

from pathlib import Path

from setuptools import find_packages, setup  # type: ignore


ROOT = Path(__file__).resolve().parent


def _long_description() -> str:
    """Use SPEC_FULL.md as the long description when present.

    An sdist built without it still installs fine.
    """

    readme = ROOT / "SPEC_FULL.md"
    if not readme.exists():
        return ""
    return readme.read_text(encoding="utf-8")


setup(
    name="formledger",
    version="0.1.0",
    description="Owner-managed forms with allow-listed responders and append-only typed response histories",
    long_description=_long_description(),
    long_description_content_type="text/markdown",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
        "fastapi",
        "uvicorn",
        "httpx",
        "python-dotenv",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "formledger=formledger.__main__:main",
        ],
    },
)
