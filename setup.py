from setuptools import setup, find_packages

setup(
    name='constdb',
    version='1.0.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    entry_points={
        'console_scripts': [
            'constdb=constdb.cli.cdb_cli:main',
        ],
    },
    extras_require={
        'test': ['pytest'],
    },
    python_requires='>=3.7',
)
