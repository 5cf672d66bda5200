from setuptools import setup, find_packages
from pathlib import Path

setup(
    name="box_annotation",
    version=Path("./box_annotation/VERSION").read_text().strip(),
    packages=find_packages(include=["box_annotation", "box_annotation.*"]),
    package_data={"box_annotation": ["VERSION"]},
    install_requires=[
        "numpy",
        "opencv-python",
        "easydict",
        "requests",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["box_annotation=box_annotation.cli:main"],
    },
)
