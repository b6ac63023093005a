"""Test sessions for the storefront backend.

`nox -s tests` runs everything; the narrower sessions map onto the test
folders so a change to one layer can be checked on its own.
"""

import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]

# protean[postgresql] pulls in psycopg2, whose wheel is built per interpreter
# and can be served stale from poetry's cache
_REBUILT_PER_INTERPRETER = ["psycopg2"]


def _install(session: nox.Session) -> None:
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_REBUILT_PER_INTERPRETER)


def _pytest(session: nox.Session, *paths: str) -> None:
    _install(session)
    session.run("pytest", *paths, *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole suite, including the slow concurrency and large-cart tests."""
    _pytest(session)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Aggregates, money rounding and the order state machine."""
    _pytest(session, "tests/storefront/domain/")


@nox.session(python=PYTHON_VERSIONS)
def tests_application(session: nox.Session) -> None:
    """Services against the in-memory store, without the slow races."""
    _pytest(session, "tests/storefront/application/", "-m", "not slow")


@nox.session(python=PYTHON_VERSIONS)
def tests_api(session: nox.Session) -> None:
    """FastAPI routes through the test client."""
    _pytest(session, "tests/storefront/integration/")


@nox.session(python=PYTHON_VERSIONS)
def tests_bdd(session: nox.Session) -> None:
    """Checkout and cancellation scenarios."""
    _pytest(session, "tests/storefront/bdd/")
