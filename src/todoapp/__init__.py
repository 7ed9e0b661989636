"""Todo list client with accounts and referral codes."""

__version__ = "0.1.0"
