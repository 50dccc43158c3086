from setuptools import find_packages, setup

setup(
    name="slack-meet",
    version="0.1.0",
    description="Slack /meet command that creates Google Meet links on behalf of the user",
    package_dir={"": "packages/core"},
    packages=find_packages(where="packages/core"),
    python_requires=">=3.10",
    install_requires=[
        "SQLAlchemy>=2.0",
        "alembic>=1.12",
        "fastapi>=0.110",
        "httpx>=0.27",
        "psycopg[binary]>=3.1",
        "python-json-logger>=2.0",
        "uvicorn>=0.29",
    ],
    extras_require={"test": ["pytest>=8.0"]},
)
