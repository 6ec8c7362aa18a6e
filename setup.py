from setuptools import setup, find_packages

setup(
    name="minesweeper_server",
    version="0.1",
    packages=find_packages(include=["backend", "backend.*", "frontend", "frontend.*"]),
    install_requires=[
        "flask",
        "pyyaml",
        "numpy"
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "minesweeper-server=frontend.app:main"
        ]
    },
)
