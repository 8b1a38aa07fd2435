"""Command-line front end (``mvx-agent``)."""
