from setuptools import setup, find_packages

with open('requirements.txt') as f:
    required = f.read().splitlines()

setup(
    name = 'conflux',
    version = '0.1.0',
    description = 'Layered configuration aggregation with validation and dataclass binding',
    packages = find_packages(exclude=['test', 'test.*']),
    install_requires = required,
    extras_require = {
        'test': ['pytest', 'pytest-cov'],
    },
    python_requires = '>=3.9',
)
