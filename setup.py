import pathlib
import sys

from setuptools import find_packages, setup


__author__ = "The alnkit developers"
__copyright__ = "Copyright 2024-date, The alnkit developers"
__license__ = "BSD-3"
__version__ = "2024.10.1"
__status__ = "Beta"

# Check Python version, no point installing if unsupported version inplace
min_version = (3, 10)
if sys.version_info < min_version:
    py_version = ".".join(str(n) for n in sys.version_info)
    msg = (
        f"Python-{'.'.join(map(str, min_version))} or greater is required, "
        f"Python-{py_version} used."
    )
    raise RuntimeError(msg)


short_description = "Gapped multiple sequence alignments and their structural transforms"

readme_path = pathlib.Path(__file__).parent / "README.md"

long_description = readme_path.read_text()


PACKAGE_DIR = "src"

setup(
    name="alnkit",
    version=__version__,
    author="The alnkit developers",
    description=short_description,
    long_description=long_description,
    long_description_content_type="text/markdown",
    platforms=["any"],
    license=__license__,
    keywords=[
        "biology",
        "genomics",
        "alignment",
        "bioinformatics",
    ],
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: BSD License",
        "Topic :: Scientific/Engineering :: Bio-Informatics",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    packages=find_packages(where="src"),
    package_dir={"": PACKAGE_DIR},
    python_requires=">=3.10",
    install_requires=[
        "chardet",
        "numpy",
        "numba>0.53",
        "scitrack",
        "typing_extensions",
    ],
    extras_require={
        "test": [
            "nox",
            "pytest>=4.3.0",
            "pytest-cov",
        ],
        "dev": [
            "black",
            "isort",
            "nox",
            "pytest>=4.3.0",
            "pytest-cov",
        ],
    },
)
