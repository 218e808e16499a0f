"""Root pytest configuration for all tests."""

import logging

# atlassian-python-api logs request failures at ERROR level; the tests
# exercise failure paths on purpose.
logging.getLogger("atlassian").setLevel(logging.WARNING)
