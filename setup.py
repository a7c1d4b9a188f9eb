from setuptools import setup, find_packages

setup(
    name="pc-matcher",
    version="1.0.0",
    description="Program committee reviewer assignment library",
    license="MIT",
    packages=find_packages(include=["pcmatcher", "pcmatcher.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy",
        "ortools>=9.0",
        "Flask>=2.0",
        "flask-cors>=3.0",
    ],
    extras_require={
        "test": ["pytest>=7"],
        "full": ["gunicorn"],
    },
    entry_points={
        "console_scripts": ["pcmatcher=pcmatcher.__main__:main"],
    },
    zip_safe=False,
)
