from setuptools import setup, find_packages


setup(
    name="cats",
    version="1.0.0",
    packages=find_packages(include=["cats", "cats.*"]),
    description="Pack directory trees into a single deduplicated, optionally gzip-compressed .cats archive.",
    python_requires=">=3.8",
    install_requires=[
        "pycryptodomex>=3.23.0",
    ],
    entry_points={
        "console_scripts": [
            "cats=cats.cli:main",
        ]
    },
)
