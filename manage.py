#!/usr/bin/env python
import os
import sys


def main() -> None:
    """Run administrative tasks.

    Sets the default settings module and hands over to Django.
    """
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'server.settings')

    from django.core.management import execute_from_command_line  # noqa: WPS433

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
