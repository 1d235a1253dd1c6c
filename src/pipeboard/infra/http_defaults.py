"""
Default HTTP headers used when talking to the pipeline executor.

The executor exposes a JSON webhook, so requests advertise JSON in both
directions and identify themselves with the package's user agent.
"""

from pipeboard.version import __version__

# -----------------------------------------------------------------------------
# Default preferences & headers
# -----------------------------------------------------------------------------

DEFAULT_USER_AGENT = f"pipeboard/{__version__}"

ACCEPT_JSON = "application/json"

DEFAULT_USER_HEADERS = {
    "Accept": ACCEPT_JSON,
    "Accept-Encoding": "gzip, deflate",
    "Content-Type": ACCEPT_JSON,
    "User-Agent": DEFAULT_USER_AGENT,
}
