#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
pgconstrdiff - Generate DDL to bring PostgreSQL constraints up to date.
"""
from setuptools import setup


setup(
    name='pgconstrdiff',
    version='0.1.0',
    packages=['pgconstrdiff', 'pgconstrdiff.dbobject'],
    package_data={'pgconstrdiff': ['config.yaml']},
    entry_points={
        'console_scripts': [
            'constrdiff = pgconstrdiff.constrdiff:main']},

    python_requires='>=3.7',
    install_requires=[
        'psycopg[binary] >= 3.1',
        'PyYAML >= 5.1.0'],

    extras_require={'test': ['pytest']},

    description='Generate DDL to bring PostgreSQL table constraints up to '
    'date with a YAML specification',
    long_description=open('README.rst').read(),
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Environment :: Console',
        'Intended Audience :: Developers',
        'Intended Audience :: System Administrators',
        'License :: OSI Approved :: BSD License',
        'Natural Language :: English',
        'Operating System :: OS Independent',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: SQL',
        'Topic :: Database :: Front-Ends',
        'Topic :: Software Development :: Code Generators',
        'Topic :: Software Development :: Version Control'],
    platforms='OS-independent',
    license='BSD')
