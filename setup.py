from setuptools import setup, find_packages


setup(
    name="mtree-writer",
    version="0.1",
    packages=find_packages(),
    description="Streaming writer for mtree-style manifest specifications.",
    author="vercingetorx",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    extras_require={
        "zstd": ["zstandard>=0.20.0"],
    },
    entry_points={
        "console_scripts": [
            "mtreewriter=mtreewriter.cli:main",
        ]
    },
)
