import os

import nox

PYTHON_VERSIONS = ["3.11", "3.12", "3.13", "3.14"]
LATEST = PYTHON_VERSIONS[-1]

# psycopg2 ships a C extension; a cached wheel may target another interpreter.
_REBUILD = ["psycopg2"]

AREAS = ("product", "cart", "order", "review")

nox.options.sessions = ["tests"]


def _install(session: nox.Session) -> None:
    session.run("poetry", "install", "--all-extras", external=True)
    session.run("pip", "install", "--force-reinstall", "--no-cache-dir", *_REBUILD)


@nox.session(python=PYTHON_VERSIONS)
def tests(session: nox.Session) -> None:
    """Whole suite on the in-memory providers."""
    _install(session)
    session.run("pytest", *session.posargs)


@nox.session(python=PYTHON_VERSIONS)
def tests_domain(session: nox.Session) -> None:
    """Aggregate and value object tests only."""
    _install(session)
    session.run("pytest", *[f"tests/{area}/domain/" for area in AREAS])


@nox.session(python=LATEST)
def tests_api(session: nox.Session) -> None:
    """HTTP tests through the FastAPI routers."""
    _install(session)
    session.run("pytest", "-m", "integration", *session.posargs)


@nox.session(python=LATEST)
def tests_postgres(session: nox.Session) -> None:
    """Application tests against PostgreSQL via the production overlay.

    Needs ``DATABASE_URL`` pointing at a disposable database.
    """
    if "DATABASE_URL" not in os.environ:
        session.skip("DATABASE_URL is not set")
    _install(session)
    session.run("pytest", "--env", "production", "-m", "application", *session.posargs)


@nox.session(python=LATEST)
def loadtest(session: nox.Session) -> None:
    """Headless mixed workload against a running server (default http://localhost:8000)."""
    _install(session)
    host = os.environ.get("STOREFRONT_URL", "http://localhost:8000")
    session.run(
        "locust",
        "-f",
        "loadtests/locustfile.py",
        "MixedWorkloadUser",
        "--headless",
        "--host",
        host,
        "-u",
        "20",
        "-r",
        "5",
        "-t",
        "60s",
        *session.posargs,
    )
