from setuptools import setup, find_packages

# EN: Read requirements from file | FR: Lecture des dépendances depuis le fichier
with open("requirements.txt") as f:
    requirements = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    # EN: Basic package metadata | FR: Métadonnées de base du paquet
    name="log_stats",
    version="1.0",
    description="Concurrent access log statistics for Apache and simple formats",
    long_description=open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    author="TouyA0",
    packages=find_packages(include=["log_stats*"]),
    install_requires=requirements,
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "log-stats = log_stats.cli:main"
        ]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Topic :: System :: Logging",
        "Intended Audience :: System Administrators"
    ],
    python_requires=">=3.8"
)
