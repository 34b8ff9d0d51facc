from setuptools import setup, find_packages

setup(
    name="dnd-companion-events",
    version="0.1.0",
    description="D&D companion - character event bus with undo/redo history",
    author="Your Name",
    packages=find_packages(include=["companion", "companion.*"]),
    include_package_data=True,
    install_requires=[
        # Core data modeling and validation
        "pydantic>=2.0.0",

        # Environment variables
        "python-dotenv>=1.0.0",

        # CLI and rich output
        "typer>=0.9.0",
        "rich>=13.0.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "companion = companion.cli:main",
        ],
    },
    python_requires=">=3.11",
    package_dir={"": "."},
)
