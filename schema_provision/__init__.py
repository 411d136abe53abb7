"""MongoDB schema provisioning for the common and order-service databases."""

__version__ = "1.0.0"
