"""bumpkin - semantic version tagger for git repositories."""

__version__ = "0.4.0"
