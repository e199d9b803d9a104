from setuptools import setup, find_packages

setup(
    name="sol-flight",
    version="0.1.0",
    description="Batched SOL distribution to a list of recipient addresses on Solana",
    long_description=open("README.md").read(),
    long_description_content_type="text/markdown",
    author="SOL Flight Contributors",
    packages=find_packages(include=["sol_flight", "sol_flight.*"]),
    install_requires=[
        "rich>=10.0.0",
        "python-dotenv>=0.19.0",
        "requests>=2.26.0",
        "pandas>=1.3.0",
        "solana>=0.30.2,<0.40",
        "solders>=0.18.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.21",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
    entry_points={
        "console_scripts": [
            "sol-flight=sol_flight.cli:main",
            "sol-flight-keygen=sol_flight.cli:keygen_main",
        ],
    },
)
