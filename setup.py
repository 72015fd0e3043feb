from setuptools import setup

setup(
    name='pyrwh',
    version='0.1.0',
    packages=['pyrwh'],
    license='MIT',
    description='package for rainwater harvesting balance simulation and storage sizing',
    python_requires='>=3.9',
    install_requires=["pandas", "numpy", "scipy", "pdrle", "toml"],
    extras_require={"test": ["pytest"]}
)
