from setuptools import setup, find_packages

with open("README.rst") as f:
    readme = f.read()

setup(
    name="laskit",
    version="0.1.0",
    description="LAS 1.2/1.3 point cloud reading and writing in python",
    long_description=readme,
    python_requires=">=3.6",
    keywords="las lidar point cloud",
    license="BSD 3-Clause",
    packages=find_packages(exclude=("tests",)),
    zip_safe=False,
    install_requires=["numpy"],
    extras_require={
        "dev": [
            "pytest",
        ]
    }
)
