from setuptools import setup, find_packages

setup(
    name="agent_knowledge",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "pyyaml",
        "tqdm>=4.60",
    ],
    extras_require={
        # On-device embeddings (install separately when needed)
        "local": [
            "sentence-transformers>=2.2",
        ],
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "agent-knowledge=agent_knowledge.cli:main",
        ],
    },
    author="Uday Kanth",
    description="Embedding providers, cache-first embedding and folder ingestion for agent runtimes.",
)
