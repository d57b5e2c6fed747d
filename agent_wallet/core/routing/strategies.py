"""Route selection strategies.

The aggregator returns candidates already ordered by its ``order`` option;
``first_route`` keeps that recommendation, the others re-rank locally.
"""

from typing import Callable, Dict, Sequence

from ..errors import InvalidParameter, NoRouteFound
from .models import Route

RouteSelector = Callable[[Sequence[Route]], Route]


def first_route(routes: Sequence[Route]) -> Route:
    if not routes:
        raise NoRouteFound()
    return routes[0]


def cheapest_gas(routes: Sequence[Route]) -> Route:
    """Lowest estimated gas cost in USD; ties keep the aggregator order."""
    if not routes:
        raise NoRouteFound()
    return min(routes, key=lambda route: route.gas_cost_usd)


def fastest(routes: Sequence[Route]) -> Route:
    """Shortest summed step execution duration."""
    if not routes:
        raise NoRouteFound()
    return min(routes, key=lambda route: route.execution_duration)


SELECTORS: Dict[str, RouteSelector] = {
    "recommended": first_route,
    "first": first_route,
    "cheapest_gas": cheapest_gas,
    "fastest": fastest,
}


def get_selector(name: str) -> RouteSelector:
    selector = SELECTORS.get(name.lower().strip())
    if selector is None:
        raise InvalidParameter(
            f"Unknown route selector {name!r}. Must be one of: {', '.join(sorted(SELECTORS))}",
            field_name="route_selector",
        )
    return selector
