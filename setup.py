from setuptools import setup, find_packages

setup(
    name="raster_bench",
    version="0.1.0",
    description="Throughput benchmarks for 2D rendering backends with baseline comparison",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    packages=find_packages(include=["raster_bench", "raster_bench.*"]),
    py_modules=["run_benchmark"],
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.10",
    install_requires=[
        "pillow>=11.1.0",
        "numpy>=2.2.3",
        "psutil>=7.0.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=8.3.4",
            "pytest-cov>=6.0.0",
            "coverage>=7.6.12",
        ],
    },
    entry_points={
        "console_scripts": [
            "raster-bench=raster_bench.run:main",
        ],
    },
)
