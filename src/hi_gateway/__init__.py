"""HI Gateway.

JSON request/response front end for the Healthcare Identifiers (HI) registry
web services: consumer (IHI), provider individual and provider organisation
operations.
"""

__version__ = "0.1.0"
