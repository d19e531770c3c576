from setuptools import find_packages, setup

setup(
    name='pykdec',
    version='0.1.0',
    description='Discrete exterior calculus over cells of Khalimsky spaces',
    packages=find_packages(exclude=['examples', 'examples.*']),
    install_requires=[
        'numpy',
        'scipy>=1.9',
        'numpy-indexed',
        'matplotlib',
        'cached-property',
    ],
    extras_require={
        'test': ['pytest'],
    },
    license='LGPL',
    platforms='any',
    zip_safe=False,
)
