"""CLI entry points for subintake.

Provides command-line tools for:
- Processing proposal documents into contact records
- Grouping contact records by subcontractor
"""

import sys

import click

from .. import __version__
from ..logging import setup_logging
from .intake import group_command, process_command


@click.group()
@click.version_option(version=__version__, prog_name="subintake")
def main():
    """subintake - Subcontractor document intake.

    Extracts contact details from bid and proposal documents and
    groups them by subcontractor.
    """
    setup_logging(stream=sys.stderr)


main.add_command(process_command, name="process")
main.add_command(group_command, name="group")


if __name__ == "__main__":
    main()
