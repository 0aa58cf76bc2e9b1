from setuptools import setup, find_packages

setup(
    name="vecm-regime-stability",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy",
        "pandas",
        "statsmodels",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
    python_requires=">=3.8",
)