"""Locust entry point for the storefront API.

Importing the scenario modules is what makes their user classes visible to
Locust; pick one by class name on the command line.

    locust -f loadtests/locustfile.py                          # web UI, every user class
    locust -f loadtests/locustfile.py MixedWorkloadUser        # realistic traffic
    locust -f loadtests/locustfile.py StockContentionUser      # one product, many buyers
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless -u 50 -r 5 -t 300s --csv=results/run
"""

import logging
import time

import requests
from locust import events

from loadtests.helpers.response import error_detail
from loadtests.scenarios.browsing import BrowsingUser  # noqa: F401
from loadtests.scenarios.contention import StockContentionUser  # noqa: F401
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def log_failed_request(request_type, name, response, exception, **_kw):
    """Log the API's own error text for every failed request, not just the status."""
    if exception:
        logger.error("%s %s raised %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        logger.error("%s %s -> %s %s", request_type, name, response.status_code, error_detail(response))


@events.test_start.add_listener
def check_target(environment, **_kwargs):
    print(f"\n[storefront] load test started {time.strftime('%H:%M:%S')} against {environment.host}")
    if not environment.host:
        return
    try:
        resp = requests.get(f"{environment.host}/health", timeout=5)
    except requests.RequestException as exc:
        print(f"[storefront] health check failed: {exc}")
        return
    print(f"[storefront] health: {resp.status_code} {resp.text}")


@events.test_stop.add_listener
def print_summary(environment, **_kwargs):
    """Totals, then the endpoints that failed most."""
    total = environment.stats.total
    print(f"\n[storefront] stopped {time.strftime('%H:%M:%S')}")
    print(f"[storefront] {total.num_requests} requests, {total.num_failures} failures")

    failing = sorted(
        (entry for entry in environment.stats.entries.values() if entry.num_failures),
        key=lambda entry: entry.num_failures,
        reverse=True,
    )
    for entry in failing[:5]:
        print(f"  {entry.method} {entry.name}: {entry.num_failures}/{entry.num_requests} failed")
