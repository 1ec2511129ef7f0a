from setuptools import setup, find_namespace_packages

setup(
    name='atmfjstc-zip-stream',
    version='1.0.0',

    author_email='atmfjstc@protonmail.com',

    package_dir={'': 'src'},
    packages=find_namespace_packages(where='src', include=['atmfjstc.*']),

    install_requires=[
        'atmfjstc-binary-utils>=1.2.0, <2',
        'atmfjstc-file-utils>=1.2, <2',
        'atmfjstc-ez-repr>=1.1, <2',
    ],

    zip_safe=True,

    description="Forward-only reader for the local entries of ZIP archives, with deferred content retrieval",

    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Archiving :: Compression",
        "Typing :: Typed",
    ],
    python_requires='>=3.7',
)
