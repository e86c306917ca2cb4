"""git-global: keep track of all the git repositories on your machine."""

__version__ = "0.7.0"
