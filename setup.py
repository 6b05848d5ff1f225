"""
Setup configuration for the Fretboard Engine package.

This allows you to install the project with:
    pip install -e .

After installation, you can import modules like:
    from fretboard_engine import generate_triads_data
    from fretboard_engine.boxes import generate_box_shape_patterns

and run the command-line tool:
    fretboard-gen triads G
"""

from pathlib import Path

from setuptools import setup, find_packages

# Read the README for long description, when there is one
readme = Path(__file__).parent / "README.md"
long_description = readme.read_text(encoding="utf-8") if readme.exists() else ""

setup(
    # -------------------------
    # Basic Package Information
    # -------------------------
    name="guitar-fretboard-engine",
    version="0.1.0",
    description="Triad positions, scale boxes and practice progressions for 6-string guitar",
    long_description=long_description,
    long_description_content_type="text/markdown",

    # -------------------------
    # Package Discovery
    # -------------------------
    packages=find_packages(where=".", exclude=["tests", "tests.*"]),
    package_dir={"": "."},

    # -------------------------
    # Python Version Requirement
    # -------------------------
    python_requires=">=3.9",

    # -------------------------
    # Dependencies
    # -------------------------
    install_requires=[
        "numpy>=1.24.0",
        "pandas>=2.0.0",
        "pydantic>=2.0.0",
        "tqdm>=4.65.0",
        "pyyaml>=6.0",
    ],

    # Optional dependencies (install with pip install -e ".[dev]")
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },

    # -------------------------
    # Entry Points (CLI commands)
    # -------------------------
    entry_points={
        "console_scripts": [
            # fretboard-gen triads G
            "fretboard-gen=fretboard_engine.app.cli:main",
        ],
    },

    # -------------------------
    # Metadata
    # -------------------------
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Education",
        "Topic :: Multimedia :: Sound/Audio",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    keywords="guitar, fretboard, triads, scales, pentatonic, blues, music theory",
)
