"""galaxy-sync: Ansible collection discovery and catalog sync."""

__version__ = "0.1.0"
