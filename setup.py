from setuptools import setup, find_packages

setup(
    name="runcontainer",
    version="0.1.0",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    python_requires=">=3.9",
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.0",
        "docker>=6.0",
        "packaging>=22.0",
        "semver>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "runcontainer=runcontainer.CLI.main:main",
        ],
    },
)
