# setup.py
from setuptools import setup, find_packages

setup(
    name="nextexpress",
    version="0.1.0",
    description="Compile a file-based app/ route tree into a single Express server module",
    package_dir={"": "src"},
    packages=find_packages("src"),
    python_requires=">=3.9",
    install_requires=[
        "tree-sitter>=0.22",
        "tree-sitter-typescript>=0.21",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'nextexpress=nextexpress.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
