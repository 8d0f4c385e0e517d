import runpy
from setuptools import setup, find_packages

__version__ = runpy.run_path("segeval/__version__.py")["__version__"]

requires = [
    "numpy",
    "imageio",
    "scikit-image",
    "scipy",
    "threadpoolctl",
    "tqdm",
]


# optional dependencies for setuptools
extras = {
    "test": ["pytest", "scikit-learn"],
}

setup(
    name="segeval",
    packages=find_packages(exclude=["test"]),
    version=__version__,
    install_requires=requires,
    extras_require=extras,
    license="MIT",
    entry_points={
        "console_scripts": [
            "segeval_best_threshold = segeval.evaluation.find_best_threshold:main",
        ]
    },
)
