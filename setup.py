import os

from setuptools import setup, find_packages

with open(os.path.join(os.path.dirname(__file__), "readme.md"), "r") as fh:
    long_description = fh.read()

setup(
    name='gocargo',
    version='1.0.0',
    license='MIT',
    description='The API server for the GoCarGo car rental service.',
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=("tests", "tests.*")),
    python_requires='>=3.8',
    install_requires=[
        'aiohttp>=3.8',
        'aiohttp-cors>=0.7',
        'aiohttp-apispec>=2.2',
        'apispec',
        'marshmallow>=3.13,<4',
        'marshmallow-jsonschema>=0.13',
        'tortoise-orm>=0.19',
        'bcrypt>=3.2',
        'python-jose>=3.3',
        'sentry-sdk>=1.5',
        'uvloop',
    ],
    extras_require={
        'test': [
            'pytest',
            'pytest-aiohttp>=1.0',
            'pytest-asyncio>=0.17',
            'faker',
        ],
    },
    entry_points={
        'console_scripts': ['gocargo=gocargo.cli:run'],
    },
)
