from setuptools import find_packages, setup

setup(
    name="httpsimple",
    version="0.1.0",
    description="Simple procedural interface to HTTP clients",
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=[
        "httpx>=0.24",
        "requests>=2.31",
        "urllib3>=2",
        "docopt>=0.6.2",
        "typing_extensions>=4.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["httpsimple=httpsimple.__main__:main"],
    },
)
