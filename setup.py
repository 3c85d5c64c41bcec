from setuptools import setup, find_packages

setup(
    name="pyrobustid",
    packages=find_packages(
        include=["pyrobustid", "pyrobustid.*"]),
    version='0.3.0',
    description="Robust low-rank filtering and autoregressive identification from corrupted time series.",
    author="Bruno Lima Netto",
    author_email="brunolimanetto@gmail.com",
    url="https://github.com/BruninLima",
    keywords=["System", "Identification", "Robust", "PCA", "Total", "Least", "Squares"],
    python_requires=">=3.8",
    install_requires=[
        'numpy',
        'scipy',
    ],
    extras_require={
        'test': ['pytest'],
        'examples': ['matplotlib'],
    },

    classifiers=[
        'Development Status :: 3 - Alpha',
        'Intended Audience :: Science/Research',
        'Topic :: Software Development :: Libraries',
        'Programming Language :: Python :: 3'
    ]

)
