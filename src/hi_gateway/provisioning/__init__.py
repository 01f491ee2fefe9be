"""Client provisioning: registry settings, certificate retrieval and identity shapes."""

from .certificate_store import CertificateStore
from .parameter_store import ParameterStore, RegistrySettings
from .provisioner import ClientProvisioner

__all__ = [
    "CertificateStore",
    "ClientProvisioner",
    "ParameterStore",
    "RegistrySettings",
]
