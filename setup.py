from setuptools import setup
from pathlib import Path

this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text(encoding="utf-8")

setup(
    name="democast",
    version="0.1.0",
    description="Scripted browser recordings turned into polished demo GIFs and videos",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=[
        "democast",
        "democast.capture",
        "democast.compose",
        "democast.driver",
        "democast.scenario",
    ],
    install_requires=[
        "zendriver",
        "Pillow>=10.3",
        "PyYAML",
        "pydantic>=2",
    ],
    extras_require={
        "test": ["pytest", "pytest-asyncio"],
    },
    entry_points={
        "console_scripts": ["democast=democast.cli:main"],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
)
