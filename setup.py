from setuptools import setup, find_packages
from codecs import open
from os import path


here = path.abspath(path.dirname(__file__))


with open(path.join(here, 'README.rst'), encoding='utf-8') as f:
    long_description = f.read()

with open(path.join(here, 'virbio', '__init__.py')) as pkg:
    __version__ = eval(pkg.readline().split('=')[1])


setup(
    name='virbio',
    version=__version__,
    description='Garmin VIRB telemetry and recording session handling',
    long_description=long_description,
    license='MIT',
    keywords='garmin virb fit gps action camera video',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Multimedia :: Video',
        'License :: OSI Approved :: MIT License',
        'Programming Language :: Python :: 3',
    ],

    packages=find_packages(),
    python_requires='>=3.6',
    install_requires=[
        'numpy>=1.11.1',
        'pandas>=0.18.1',
        'pytz>=2011.11',
    ],
    extras_require={
        'test': ['pytest'],
    },
)
