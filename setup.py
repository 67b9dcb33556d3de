#!/usr/bin/env python

# How to build source distribution
#   - python setup.py sdist --format bztar
#   - python setup.py sdist --format gztar
#   - python setup.py sdist --format zip
#   - python setup.py bdist_wheel


import os

from setuptools import setup, find_packages


MAJOR = 0
MINOR = 1
MICRO = 0
VERSION = "{0}.{1}.{2}".format(MAJOR, MINOR, MICRO)


def write_version_file(fn=None):
    if fn is None:
        fn = os.path.join(
            os.path.dirname(os.path.abspath(__file__)),
            os.path.join("overlap_mr", "version.py"),
        )

    content = ("\n# THIS FILE WAS GENERATED AUTOMATICALLY\n"
               'overlap_mr_version = "{version}"\n')

    a = open(fn, "w")
    try:
        a.write(content.format(version=VERSION))
    finally:
        a.close()


def setup_package():
    # Saving the version into a file
    write_version_file()

    setup(
        name="overlap_mr",
        version=VERSION,
        description="Simulations of sample overlap and winner's curse bias "
                    "in two-sample Mendelian randomization.",
        license="MIT",
        install_requires=["numpy >= 1.17.0", "pandas >= 0.19.0",
                          "setuptools >= 26.1.0",
                          "scipy >= 1.9",
                          "linearmodels >= 4.0"],
        extras_require={"test": ["pytest"]},
        packages=find_packages(exclude=["simulation_models*"]),
        classifiers=["Development Status :: 4 - Beta",
                     "Intended Audience :: Science/Research",
                     "License :: Free for non-commercial use",
                     "Operating System :: Unix",
                     "Operating System :: POSIX :: Linux",
                     "Operating System :: MacOS :: MacOS X",
                     "Operating System :: Microsoft",
                     "Programming Language :: Python",
                     "Programming Language :: Python :: 3",
                     "Topic :: Scientific/Engineering :: Bio-Informatics"],
        keywords="statistics causal mendelian randomization winner's curse "
                 "sample overlap genetics",
        entry_points={
            "console_scripts": [
                "overlap-mr=overlap_mr.cli:main"
            ]
        }
    )


if __name__ == "__main__":
    setup_package()
