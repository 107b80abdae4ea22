from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="dlmm-manager",
    version="0.1.0",
    author="Your Name",
    description="Liquidity management for Meteora DLMM pools on Solana",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/yourusername/dlmm-manager",
    packages=find_packages(exclude=["tests", "results", "venv"]),
    python_requires=">=3.9",
    install_requires=[
        "solana>=0.34.0,<0.40",
        "solders>=0.21.0",
        "python-dotenv>=1.0.0",
        "requests>=2.31.0",
        "fastapi>=0.110.0",
        "uvicorn>=0.29.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "httpx>=0.27.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "dlmm-manager=dlmm_manager.cli.main:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
