"""Business logic services layer.

Core services for ani-track:
- aggregator: Fan-out of link resolution across sources, merged by episode
- dispatch_queue: Per-connection ordering of acknowledged requests
- events: In-process event hub and connections
- repository: JSON-backed title store
- tracker_service: Request handlers for titles, sources and episodes
"""

from services import aggregator, dispatch_queue, events, repository, tracker_service

__all__ = [
    "aggregator",
    "dispatch_queue",
    "events",
    "repository",
    "tracker_service",
]
