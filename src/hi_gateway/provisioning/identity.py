"""Identity shape builders.

Builds the product, user and organisation identities a registry operation's
message header needs from plain configuration strings. The builders are
coded against the ``QualifiedIdentity`` and ``ProductIdentity`` protocols and
construct whichever concrete per-release type they are handed.
"""

from typing import Callable, Optional, TypeVar

from ..models.identity import ProductIdentity, QualifiedIdentity

APPNAME_PLACEHOLDER = "{appname}"

Q = TypeVar("Q", bound=QualifiedIdentity)
P = TypeVar("P", bound=ProductIdentity)


def normalize_product_name(product_name: str) -> str:
    """Lower-case the product name and strip its spaces.

    Example:
        >>> normalize_product_name("Better Clinics PMS")
        'betterclinicspms'
    """
    return product_name.replace(" ", "").lower()


def build_product(
    product_type: Callable[..., P],
    qualified_type: Callable[..., QualifiedIdentity],
    platform: str,
    product_name: str,
    product_version: str,
    vendor_id: str,
    vendor_qualifier: str,
) -> P:
    """Build the product identity for one schema release.

    Args:
        product_type: Concrete product type to construct
        qualified_type: Concrete qualified-id type for the vendor
        platform: Platform name
        product_name: Registered product name
        product_version: Product version
        vendor_id: Vendor identifier
        vendor_qualifier: Vendor identifier qualifier

    Returns:
        Product identity of type ``product_type``
    """
    return product_type(
        platform=platform,
        product_name=product_name,
        product_version=product_version,
        vendor=qualified_type(id=vendor_id, qualifier=vendor_qualifier),
    )


def build_user(
    qualified_type: Callable[..., Q],
    user_id: str,
    qualifier_template: str,
    product_name: str,
) -> Q:
    """Build the acting user identity.

    The qualifier template may contain ``{appname}``, which is replaced by the
    normalized product name.

    Args:
        qualified_type: Concrete qualified-id type to construct
        user_id: Identifier of the acting user
        qualifier_template: Qualifier, possibly with the placeholder
        product_name: Registered product name

    Returns:
        User identity of type ``qualified_type``

    Example:
        >>> build_user(Release3QualifiedId, "jsmith",
        ...            "http://ns.example.com/id/{appname}/userid/1.0", "My App").qualifier
        'http://ns.example.com/id/myapp/userid/1.0'
    """
    qualifier = qualifier_template.replace(
        APPNAME_PLACEHOLDER, normalize_product_name(product_name)
    )
    return qualified_type(id=user_id, qualifier=qualifier)


def build_hpio(
    qualified_type: Callable[..., Q],
    hpio: Optional[str],
    qualifier: str,
) -> Optional[Q]:
    """Build the organisation identity, or nothing for a blank HPI-O.

    Args:
        qualified_type: Concrete qualified-id type to construct
        hpio: HPI-O number of the organisation
        qualifier: HPI-O qualifier (lower-cased on use)

    Returns:
        Organisation identity, or None when ``hpio`` is blank
    """
    if hpio is None or not hpio.strip():
        return None
    return qualified_type(id=hpio, qualifier=qualifier.lower())
