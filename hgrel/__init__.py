"""Extract the files changed since the latest Mercurial tag."""

__version__ = "0.1.0"
