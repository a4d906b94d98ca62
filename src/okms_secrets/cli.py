"""
Command line entry point.

Exposes the task collection as the okms-secrets program:

    okms-secrets secrets.get app/db --property=password
    okms-secrets --list
"""

from invoke import Program

from okms_secrets import __version__
from okms_secrets.config.logging import bootstrap_logging
from okms_secrets.tasks import namespace

program = Program(namespace=namespace, version=__version__, name='okms-secrets', binary='okms-secrets')


def main():
    """Configure logging, then run the program."""
    bootstrap_logging('okms_secrets')
    program.run()
