import os
from setuptools import setup


src_version = os.path.join(os.path.dirname(__file__), "aocdriver", "version.py")
with open(src_version) as f:
    version = f.read().strip().split()[-1][1:-1]


setup(
    name="advent-of-code-driver",
    version=version,
    description="Fetch your puzzle inputs, run your solutions, submit your answers",
    long_description=open("README.rst").read(),
    long_description_content_type="text/x-rst",
    packages=["aocdriver"],
    entry_points={
        "console_scripts": [
            "aoc-input=aocdriver.cli:main",
            "aoc-drive=aocdriver.cli:drive",
        ],
    },
    license="MIT",
    classifiers=[
        "Intended Audience :: Developers",
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Topic :: Software Development :: Libraries",
        "Topic :: Games/Entertainment :: Puzzle Games",
    ],
    python_requires=">=3.9",
    install_requires=[
        "urllib3>=2",
        "beautifulsoup4",
        "pebble",
        'tomli; python_version < "3.11"',
        'colorama>=0.4.6; platform_system == "Windows"',
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
            "pytest-raisin",
            "pytest-freezer",
            "pook",
        ],
    },
)
