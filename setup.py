from setuptools import setup, find_packages
setup(
    name="hawaii_parcels",
    version="0.1.0",
    package_dir={"": "src"},
    packages=find_packages("src"),
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "requests>=2.28",
        "fastapi>=0.100",
        "pydantic>=2",
        "shapely>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7",
            "httpx>=0.24",
        ],
    },
    entry_points={
        'console_scripts': [
            'hawaii_parcels=hawaii_parcels.__main__:_safe_main'
        ]
    }
)
