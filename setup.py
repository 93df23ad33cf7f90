from setuptools import setup, find_packages

setup(
    name="aggregate_stability",
    version="0.1.0",
    packages=find_packages("src"),
    package_dir={"": "src"},
    install_requires=[
        "opencv-python",  # for image decoding
        "numpy",
        "scikit-image>=0.19",  # for Otsu thresholding and grayscale reduction
        "pandas",  # for the result table
        "tqdm",
        "tifffile",  # for mask export
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "aggregate-stability=aggregate_stability.cli:main",
        ],
    },
    author="Soil Aggregate Imaging Team",
    description="Wet aggregate stability index from before/after submersion images",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    python_requires=">=3.8",
)
