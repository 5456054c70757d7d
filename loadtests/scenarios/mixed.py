"""Mixed storefront workload scenario.

Combines browsing and shopping journeys with weights that model realistic
e-commerce traffic patterns. This is the recommended scenario for load
baseline testing.
"""

from locust import HttpUser, between

from loadtests.scenarios.shopping import (
    CartAbandonmentJourney,
    CheckoutToReviewJourney,
    OrderCancellationJourney,
)


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload simulating concurrent shoppers.

    Most carts are abandoned, a smaller share checks out and follows the
    order through delivery to a verified review, and a few orders are
    cancelled before they ship.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        CartAbandonmentJourney: 6,
        CheckoutToReviewJourney: 3,
        OrderCancellationJourney: 1,
    }
