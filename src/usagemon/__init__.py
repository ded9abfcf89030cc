"""Phone usage reporting: aggregation, PNG charts and Slack delivery."""

__version__ = "0.1.0"
