#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# This is a python install script written for pyMARG python package.
# pip3 install --upgrade setuptools wheel build
#
# py -3 setup.py sdist
# py -3 setup.py bdist_wheel
# pip3 install -e .        # -e links to the source folder
# pip3 install -e .[test]  # with pytest and scipy for the tests

import io
import os
from setuptools import setup, find_packages

here = os.path.abspath(os.path.dirname(__file__))

with io.open(os.path.join(here, "README.md"), encoding="utf-8") as f:
    long_description = f.read()

setup(
    name='pyMARG',
    version='1.0.0',
    description=("Madgwick gradient descent orientation filter for accelerometer, gyroscope and magnetometer." ),
    long_description=long_description,
    long_description_content_type='text/markdown',
    license='MIT',
    keywords='IMU, MARG, AHRS, Madgwick, quaternion, orientation',
    packages = find_packages(exclude=["tests", "tests.*", "examples"]),
    python_requires='>=3.8',
    install_requires=['numpy>1.0'],
    extras_require={
        'test': ['pytest', 'scipy'],
    },
    entry_points={
        'console_scripts': [
            'pyMARG-fuzz=pyMARG.fuzz:main',
        ],
    },
    classifiers=[
        # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
        #   3 - Alpha
        #   4 - Beta
        #   5 - Production/Stable
        'Development Status :: 4 - Beta',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3'
    ]
)
