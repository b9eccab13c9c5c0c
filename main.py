#!/usr/bin/env python3
"""Main entry point for the AWS Health maintenance calendar generator."""

from maintenance_calendar.cli import cli

if __name__ == '__main__':
    cli()
