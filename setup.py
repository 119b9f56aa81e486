from setuptools import setup, find_packages


install_requires = [
    'PyYAML>=3.0',
    'jsonschema>=4',
    'Pillow>=8,!=8.3.0,!=8.3.1;python_version=="3.9"',
    'Pillow>=9;python_version=="3.10"',
    'Pillow>=10;python_version=="3.11"',
    'Pillow>=10.1;python_version=="3.12"',
    'Pillow>=11;python_version=="3.13"',
    'Pillow>=11;python_version>="3.14"',
]

extras_require = {
    'postgres': ['psycopg2-binary>=2.8'],
    'test': ['pytest'],
}


def long_description():
    return open('README.md').read()


setup(
    name='TileStore',
    version="1.0.0",
    description='Database backed cache for map image tiles',
    long_description=long_description(),
    long_description_content_type='text/markdown',
    license='Apache Software License 2.0',
    packages=find_packages(),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'tilestore-util = tilestore.script.util:main',
        ],
    },
    package_data={'': ['*.json']},
    install_requires=install_requires,
    extras_require=extras_require,
    python_requires='>=3.9',
    classifiers=[
        "Development Status :: 5 - Production/Stable",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Database",
        "Topic :: Scientific/Engineering :: GIS",
    ],
    zip_safe=False
)
