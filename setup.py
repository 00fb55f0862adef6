from setuptools import setup, find_packages

setup(
    name="algo-simulator",
    version="0.1.0",
    description="Step-by-step simulations of graph, maze and consensus algorithms",
    author="adamfilli",
    packages=find_packages(include=["algosim", "algosim.*"]),
    install_requires=[
        "numpy",
        "pandas",
    ],
    extras_require={
        "visual": ["fastapi", "uvicorn"],
        "test": ["pytest", "httpx", "fastapi", "matplotlib"],
    },
    include_package_data=True,
    python_requires=">=3.11",
)
