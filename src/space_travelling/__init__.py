"""Space Travelling — a statically generated blog front-end over the Prismic API."""

__version__ = "0.1.0"
