"""Registry transactions: operation table, request construction, classification and SOAP client."""
