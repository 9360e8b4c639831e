# -*- coding: utf-8 -*-
"""
Created on Tue Oct  6 08:30:12 2026

@author: p-sik
"""

import setuptools

def get_version():
    with(open("src/ReaderPET/__init__.py", "r")) as fh:
        for line in fh:
            if line.startswith("__version__"):
                delim = '"' if '"' in line else "'"
                return line.split(delim)[1]
        else:
            raise RuntimeError("Unable to find version string.")
                
def get_long_description():
    with open("README.md", "r") as fh: description = fh.read()
    return(description)
    
setuptools.setup(
    name="ReaderPET",
    version=get_version(),
    author="Pavlina Sikorova",
    author_email="pavlinasik@isibrno.cz",
    description=\
        "Reader for GE PET raw data files (RDF9 HDF5: list, sino, geo, norm).",
    long_description=get_long_description(),
    long_description_content_type="text/markdown",
    url="https://github.com/pavlinasik/ReaderPET/",
    project_urls={},
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent"],
    license='MIT',
    package_dir={"":"src"},
    packages=setuptools.find_packages(where="src"),
    package_data={"ReaderPET": ["data/*.toml"]},
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "h5py",
        "tqdm",
        "matplotlib",
        "toml; python_version<'3.11'"],
    extras_require={"test": ["pytest"]},
    include_package_data=True)
