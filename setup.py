"""Setup configuration for the CubeNet radio stack."""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="cubenet-radio",
    version="0.1.0",
    description="CubeNet - framing, routing and reliable transport over fixed-frame packet radios",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="CubeNet Team",
    python_requires=">=3.8",
    packages=find_packages(exclude=["tests", "tests.*"]),
    include_package_data=True,
    data_files=[("nodes", ["nodes/rover.json", "nodes/cube0.json", "nodes/cube1.json", "nodes/cube2.json"])],
    install_requires=[
        "meshtastic>=2.0.0",
        "pypubsub>=4.0.3",
        "pyserial>=3.5",
        "typing_extensions>=4.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "cubenet-node=node.daemon:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Environment :: Console",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Operating System :: POSIX :: Linux",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Communications",
        "Topic :: System :: Networking",
    ],
)
