"""XML signing of registry message headers using signxml.

The registry requires a detached XML signature over the product, user,
organisation and timestamp header elements, carried in its own header block.
"""

import logging
from typing import Sequence

from lxml import etree
from signxml import (
    CanonicalizationMethod,
    DigestAlgorithm,
    SignatureConstructionMethod,
    SignatureMethod,
    XMLSigner,
)

from ..models.certificates import CertificateBundle
from ..utils.exceptions import CertificateUnavailableError
from .certificate_manager import convert_key_to_pem, convert_to_pem

logger = logging.getLogger(__name__)

DS_NS = "http://www.w3.org/2000/09/xmldsig#"


class HeaderSigner:
    """Sign header elements of a SOAP envelope with the client certificate.

    Attributes:
        cert_bundle: Certificate bundle containing certificate and private key
        signer: XMLSigner configured for detached RSA-SHA256 signatures

    Example:
        >>> signer = HeaderSigner(bundle)
        >>> signature = signer.sign(envelope, ["#product", "#user", "#timestamp"])
        >>> signature.tag
        '{http://www.w3.org/2000/09/xmldsig#}Signature'
    """

    def __init__(self, cert_bundle: CertificateBundle) -> None:
        """Initialize header signer with certificate bundle.

        Args:
            cert_bundle: Certificate bundle containing certificate and private key

        Raises:
            CertificateUnavailableError: If the bundle has no private key
        """
        if cert_bundle.private_key is None:
            raise CertificateUnavailableError(
                "Certificate bundle must contain a private key for signing."
            )

        self.cert_bundle = cert_bundle
        self._key_pem = convert_key_to_pem(cert_bundle.private_key)
        self._cert_pem = convert_to_pem(cert_bundle.certificate)
        self.signer = XMLSigner(
            method=SignatureConstructionMethod.detached,
            signature_algorithm=SignatureMethod.RSA_SHA256,
            digest_algorithm=DigestAlgorithm.SHA256,
            c14n_algorithm=CanonicalizationMethod.EXCLUSIVE_XML_CANONICALIZATION_1_0,
        )

    def sign(self, envelope: etree._Element, reference_uris: Sequence[str]) -> etree._Element:
        """Produce a detached signature over the referenced elements.

        Args:
            envelope: Root of the SOAP envelope containing the referenced elements
            reference_uris: Same-document references such as ``#product``

        Returns:
            ds:Signature element, ready to be placed in a header block
        """
        signature = self.signer.sign(
            envelope,
            key=self._key_pem,
            cert=self._cert_pem,
            reference_uri=list(reference_uris),
        )
        logger.debug(
            f"Signed {len(reference_uris)} header elements with "
            f"certificate {self.cert_bundle.info.thumbprint}"
        )
        return signature
