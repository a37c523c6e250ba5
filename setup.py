from setuptools import find_packages, setup

setup(
    name='stackops',
    version='0.1',
    py_modules=['stackops'],
    packages=find_packages(include=['stackmodules', 'stackmodules.*']),
    install_requires=[
        'Click',
        'boto3',
        'botocore',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points='''
        [console_scripts]
        stackops=stackops:cli
    ''',
)
