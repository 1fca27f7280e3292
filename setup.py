from setuptools import setup, find_namespace_packages

with open("requirements.txt") as f:
    install_reqs = f.read().strip().split("\n")

setup(
    name='okreader',
    version='0.1.0',
    license='MIT license',
    description = 'secure channel to HID OMNIKEY / AViatoR smart card readers',
    long_description="secure channel to HID OMNIKEY / AViatoR smart card readers: mutual authentication, session keys and encrypted APDUs",
    packages=find_namespace_packages("src", include=["*"]),
    package_dir={"": "src"},
    install_requires=install_reqs,
    extras_require={
        'test': ['pytest', 'pytest-mock'],
    },
    python_requires='>=3.7',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
)
