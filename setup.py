from setuptools import setup


setup(
    name='bafseg',
    version='0.1.0',
    description='Two-pass segmentation of phased B-allele frequencies into allelic imbalance segments',
    packages=['bafseg', 'bafseg.utils'],
    package_dir={'': 'src'},
    package_data={'bafseg': ['bafseg.ini']},
    zip_safe=False,

    python_requires='>=3.7',

    entry_points={
        'console_scripts': [
            'bafseg = bafseg.__main__:main',
        ],
    },

    install_requires=[
        'matplotlib',
        'numpy',
        'pandas',
        'scipy',
        'seaborn',
    ],

    extras_require={
        'dev': ['pytest', 'mock']
    }

)
