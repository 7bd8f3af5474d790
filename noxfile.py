"""Nox sessions for testing across multiple Python versions."""

import nox

# Set the default venv backend to uv
nox.options.default_venv_backend = "uv"
# Python versions to test
PYTHON_VERSIONS = ["3.10", "3.11", "3.12", "3.13"]
DEFAULT_PYTHON_VERSION = "3.13"

# Nox options
nox.options.reuse_existing_virtualenvs = True
nox.options.sessions = ["tests"]


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Run tests with pytest across multiple Python versions."""
    session.install(".[test]")

    session.run("pytest", "tests/", "-v")


@nox.session(python=PYTHON_VERSIONS)
def coverage(session: nox.Session) -> None:
    """Run tests with coverage report."""
    session.install(".[test]")

    session.run(
        "pytest",
        "tests/",
        "--cov=src/ofsc",
        "--cov-report=html",
        "--cov-report=term",
        "-v",
    )


@nox.session(python=DEFAULT_PYTHON_VERSION)
def lint(session: nox.Session) -> None:
    """Run linters (Ruff and Black)."""
    session.install("ruff", "black")

    session.run("ruff", "check", "src/", "examples/", "tests/")
    session.run("black", "--check", "src/", "examples/", "tests/")


@nox.session(python=DEFAULT_PYTHON_VERSION)
def type_check(session: nox.Session) -> None:
    """Run type checking with mypy."""
    session.install("mypy")
    session.install(".")

    session.run("mypy", "src/")


@nox.session(python=DEFAULT_PYTHON_VERSION)
def format(session: nox.Session) -> None:
    """Format code with Black and Ruff."""
    session.install("ruff", "black")

    session.run("ruff", "check", "--fix", "src/", "examples/", "tests/")
    session.run("black", "src/", "examples/", "tests/")
