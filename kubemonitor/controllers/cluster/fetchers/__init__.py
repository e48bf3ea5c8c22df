"""Fetchers for the cluster resource client."""

from kubemonitor.controllers.cluster.fetchers.access_fetcher import AccessReviewFetcher
from kubemonitor.controllers.cluster.fetchers.endpoint_fetcher import EndpointFetcher
from kubemonitor.controllers.cluster.fetchers.event_fetcher import EventFetcher
from kubemonitor.controllers.cluster.fetchers.log_fetcher import LogFetcher
from kubemonitor.controllers.cluster.fetchers.resource_fetcher import ResourceFetcher

__all__ = [
    "AccessReviewFetcher",
    "EndpointFetcher",
    "EventFetcher",
    "LogFetcher",
    "ResourceFetcher",
]
