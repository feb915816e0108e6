"""Nox sessions for the giveaway bot."""

import nox

nox.options.sessions = ["tests", "lint"]
PYTHON = "3.11"
SOURCES = ("giveaway_bot", "tests", "noxfile.py")


@nox.session(python=PYTHON)
def tests(session):
    """Run the suite with branch coverage of the giveaway_bot package."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "--cov=giveaway_bot",
        "--cov-branch",
        "--cov-report=term-missing",
        "--cov-fail-under=80",
        *session.posargs,
    )


@nox.session(python=PYTHON)
def lint(session):
    session.install("ruff>=0.1.0")
    session.run("ruff", "check", *SOURCES)
    session.run("ruff", "format", "--check", *SOURCES)


@nox.session(python=PYTHON)
def sweep(session):
    """Run only the sweep, finalization and storage tests."""
    session.install("-e", ".[dev]")
    session.run(
        "pytest",
        "tests/test_scheduler.py",
        "tests/test_manager.py",
        "tests/test_storage.py",
        *session.posargs,
    )
