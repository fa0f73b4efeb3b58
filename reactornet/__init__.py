"""Building blocks for event-driven network code: ring buffers, buffer pools, a readiness poller, socket helpers, logging setup and a worker pool."""

__version__ = "0.1.0"