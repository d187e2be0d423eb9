from setuptools import setup, find_packages

setup(
    name="form-validation",
    version="0.1.0",
    description="Declarative asynchronous validation engine for forms and objects",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        'form_validation': ['local-config.yaml'],
    },
    include_package_data=True,
    install_requires=[
        'pyyaml>=6.0',
        'jsonschema>=4.17.0',
        'requests>=2.28.0',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'pytest-asyncio>=0.21',
        ],
    },
    python_requires='>=3.9',
)
