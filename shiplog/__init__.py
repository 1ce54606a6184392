"""shiplog: grouped changelogs and hosted releases from a git commit range."""

__version__ = "0.3.0"
