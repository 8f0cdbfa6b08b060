from setuptools import setup, find_packages

with open("requirements.txt") as f:
    required = [line for line in f.read().splitlines() if line and not line.startswith("#")]

setup(
    name="ai-money-machine",
    version="1.0.0",
    description="AI Money Machine - capital-flow simulation with LLM trade analysis",
    package_dir={"": "src"},
    packages=find_packages(where="src"),
    install_requires=required,
    extras_require={
        "test": ["pytest", "httpx"],
    },
    python_requires=">=3.11",
    entry_points={
        "console_scripts": [
            "aimm-manage=moneymachine.manage:main",
        ],
    },
)
