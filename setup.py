# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="go-test-explorer",
    version="0.1.0",
    description="Lazy, identity-stable discovery tree of Go tests, benchmarks and examples",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["gotestexplorer*"]),
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest"],  # Suite under tests/
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
