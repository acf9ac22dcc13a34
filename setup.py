"""
Setup the fidocal package.
"""
import setuptools

setuptools.setup(
    name="fidocal",
    version="0.1.0",
    description=(
        "Calibrated protein-level posterior error probabilities and q-values "
        "from scored peptides."
    ),
    packages=setuptools.find_packages(include=["fidocal", "fidocal.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy>=1.23",
        "pandas>=1.5",
        "scipy>=1.9",
        "typeguard>=4.1",
        "joblib>=1.2",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["fidocal = fidocal.fidocal:main"],
    },
)
