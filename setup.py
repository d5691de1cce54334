from setuptools import setup, find_packages

def parse_requirements(filename):
    with open(filename, 'r') as f:
        return [line.strip() for line in f.readlines() \
                if line.strip() and not line.startswith("#")]

TRACY_REQUIRES = [
    "opentelemetry-api>=1.20",
    "opentelemetry-sdk>=1.20",
    "opentelemetry-exporter-otlp-proto-http>=1.20",
]

setup(
    name="utility",
    version="1.0.0",
    description="Collection of often used utilities",
    packages=find_packages(include=['utility', 'utility.*']),
    python_requires=">=3.10",
    install_requires=parse_requirements('requirements.txt'),
    extras_require={
        "tracy": TRACY_REQUIRES,
        "test": ["pytest>=7.4"] + TRACY_REQUIRES,
    },
)
