"""Automated Semaphore installation for Debian and RHEL family hosts."""

__version__ = "1.0.0"
