#!/usr/bin/env python
# -*- coding: utf-8 -*-
from os import path

from setuptools import setup

this_directory = path.abspath(path.dirname(__file__))
with open(path.join(this_directory, 'README.md'), 'r') as f:
    long_description = f.read()

setup(
    name='mispclient',
    version='0.1.0',
    description='Thin Python client for the MISP REST API: find or create events, tag them and add attributes.',
    long_description=long_description,
    long_description_content_type='text/markdown',
    packages=['mispclient'],
    python_requires='>=3.8',
    classifiers=[
        'License :: OSI Approved :: BSD License',
        'Development Status :: 4 - Beta',
        'Environment :: Console',
        'Operating System :: POSIX :: Linux',
        'Intended Audience :: Information Technology',
        'Programming Language :: Python :: 3',
        'Topic :: Security',
        'Topic :: Internet',
    ],
    install_requires=['requests', 'urllib3'],
    extras_require={'brotli': ['brotli'],
                    'test': ['requests-mock']},
    tests_require=[
        'requests-mock',
    ],
    test_suite="tests.test_offline",
)
