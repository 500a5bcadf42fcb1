#!/usr/bin/env python3
"""
Org Forklift - Fork the public repositories of a GitHub organization
into another organization.

This tool discovers the public, non-archived source repositories of an
organization for a set of languages, asks for confirmation, forks each one
into the destination organization, tags the forks with a topic naming the
original owner and enables code scanning default setup on them.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from migration_orchestrator import MigrationOrchestrator

# Exit codes
EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


def main() -> NoReturn:
    if __name__ != "__main__":
        sys.exit(EXIT_EXECUTION_ERROR)

    cfg = parse_arguments()
    orchestrator = MigrationOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
