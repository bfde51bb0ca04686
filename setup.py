from setuptools import setup, find_packages

# Function to read the contents of the requirements file
def read_requirements():
    with open('requirements.txt') as req:
        return [line for line in req.read().splitlines() if line and not line.startswith('#')]

setup(
    name="fs2laynii",
    version="1.0.0",
    description='Convert Freesurfer reconstructions to LayNii rim volumes and cortical layers',
    packages=find_packages(exclude=['tests', 'tests.*']),
    python_requires=">=3.8",
    install_requires=read_requirements(),
    extras_require={
        'test': ['pytest>=7'],
    },
    entry_points={
        'console_scripts': [
            'fs2laynii = fs2laynii.fs2laynii:main',
        ]},
    include_package_data=True,
)
