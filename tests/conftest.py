"""
Root pytest configuration for okms-secrets.
"""

# Bootstrap logging for all tests
from okms_secrets.config.logging import bootstrap_logging
bootstrap_logging('tests')
