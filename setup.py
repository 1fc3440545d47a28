from setuptools import setup, find_packages
import os

# Function to read the requirements.txt file
def parse_requirements(filename="requirements.txt"):
    """Load requirements from a pip requirements file."""
    try:
        with open(os.path.join(os.path.dirname(__file__), filename), 'r') as f:
            return [line.strip() for line in f if line.strip() and not line.startswith('#')]
    except IOError:
        # If requirements.txt is not found, fall back to the core set.
        print("Warning: requirements.txt not found. Using a minimal set of dependencies.")
        return [
            "numpy",
            "pandas",
            "PyYAML",
            "matplotlib",   # For plotting
            "httpx",        # For the debrief client
        ]

# Read long description from README.md if it exists
try:
    with open(os.path.join(os.path.dirname(__file__), 'README.md'), encoding='utf-8') as f:
        long_description = f.read()
except FileNotFoundError:
    long_description = 'A headless simulation of type 2 diabetes pharmacological management for teaching.'

setup(
    name="t2dpharmsim",
    version="1.0.0",
    author="T2DPharmSim Team",
    description="Type 2 diabetes pharmacology teaching simulation",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",
    packages=find_packages(where=".", include=['T2DPharmSim', 'T2DPharmSim.*']),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Intended Audience :: Healthcare Industry",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Education",
        "Topic :: Scientific/Engineering :: Medical Science Apps.",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    python_requires=">=3.8",
    install_requires=parse_requirements(),
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    include_package_data=True,
    entry_points={
        'console_scripts': [
            't2dpharmsim-run=T2DPharmSim.examples.scripted_session:main',
        ],
    },
    keywords=[
        "diabetes",
        "type 2 diabetes",
        "pharmacology",
        "medical education",
        "simulation",
        "serious games",
    ],
)
