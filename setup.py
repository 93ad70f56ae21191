#!/usr/bin/env python

from setuptools import setup

setup(
    name='gphessian',
    version='0.1.0',
    packages=['gphessian', 'gphessian.kernel'],
    install_requires=['scipy', 'numpy'],
    extras_require={'tests': ['pytest']},
    description='Exact Gaussian process inference with gradients and Hessians of the marginal likelihood.',
    long_description=open('README.rst', 'r').read(),
    license='GPL',
)
