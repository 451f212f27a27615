"""bcs - lookup and validation tooling for the Bash Coding Standard corpus."""

__version__ = "1.0.0"
