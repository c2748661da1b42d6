#!/usr/bin/env python

from setuptools import find_packages
from setuptools import setup


description = """
Weighted Smooth L1 loss for bounding box regression implemented in Chainer
"""


install_requires = [
    'chainer>=6.0',
    'numpy<2',
]

extras_require = {
    'test': [
        'pytest',
    ],
}


setup(
    name='chainerloss',
    version='0.1.0',
    packages=find_packages(exclude=('tests', 'tests.*')),
    license='MIT',
    description=description,
    install_requires=install_requires,
    extras_require=extras_require,
    include_package_data=True,
)
