"""Nox sessions for the tagsniff quality gates."""

from __future__ import annotations

import nox

PACKAGE = "src/tagsniff"
LINT_TARGETS = ("src", "tests", "noxfile.py")

nox.options.sessions = ["lint", "typecheck", "tests"]


@nox.session
def lint(session: nox.Session) -> None:
    """Check lint rules and formatting; files are never rewritten."""
    session.install("ruff")
    session.run("ruff", "check", *LINT_TARGETS)
    session.run("ruff", "format", "--check", *LINT_TARGETS)


@nox.session(name="format")
def format_sources(session: nox.Session) -> None:
    session.install("ruff")
    session.run("ruff", "check", "--fix", *LINT_TARGETS)
    session.run("ruff", "format", *LINT_TARGETS)


@nox.session
def typecheck(session: nox.Session) -> None:
    """Type-check the package against its installed runtime dependencies."""
    session.install("-e", ".[dev]")
    session.run("mypy", PACKAGE)


@nox.session
def tests(session: nox.Session) -> None:
    """Run pytest; extra arguments after ``--`` are forwarded."""
    session.install("-e", ".[test]")
    session.run("pytest", *session.posargs)
