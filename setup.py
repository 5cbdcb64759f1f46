#!/usr/bin/env python3

import os
import re

from setuptools import find_packages, setup

REPODIR = os.path.dirname(os.path.abspath(__file__))
PACKAGEDIR = os.path.join(REPODIR, 'src')


def get_version():
    """Pull the version from the package without importing it."""
    path = os.path.join(PACKAGEDIR, 'srcbuild', '__init__.py')
    with open(path) as f:
        m = re.search(r"^__version__\s*=\s*'([^']+)'", f.read(), re.MULTILINE)
    if m is None:
        raise RuntimeError(f'unable to determine version from {path!r}')
    return m.group(1)


setup(
    name='srcbuild',
    version=get_version(),
    description='source package import, patching and generation tracking for meta-build tools',
    license='BSD',
    package_dir={'': 'src'},
    packages=find_packages('src'),
    python_requires='>=3.9',
    install_requires=['snakeoil'],
    extras_require={
        'test': ['pytest'],
    },
    classifiers=[
        'License :: OSI Approved :: BSD License',
        'Programming Language :: Python :: 3',
    ],
)
