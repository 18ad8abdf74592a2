from setuptools import setup, find_packages

setup(
    name="llm_patcher",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "requests",
        "pyyaml",
        "textual",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "llm-patcher=llm_patcher.cli:main",
        ],
    },
    python_requires=">=3.10",
    author="Uday Kanth",
    description="Applies LLM-generated diffs to source files with preview, "
                "confirmation, backup and rollback.",
)
