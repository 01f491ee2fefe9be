"""Identity shapes carried in the registry message headers.

Each registry schema release declares its own qualified-identifier and product
types. They are structurally identical but nominally distinct, so the
identity builders are written against the ``QualifiedIdentity`` and
``ProductIdentity`` protocols and take the concrete type to construct as an
argument.
"""

from dataclasses import dataclass
from typing import ClassVar, Protocol, runtime_checkable


@runtime_checkable
class QualifiedIdentity(Protocol):
    """Anything with an ``id`` and a ``qualifier`` namespace prefix."""

    @property
    def id(self) -> str: ...

    @property
    def qualifier(self) -> str: ...


@runtime_checkable
class ProductIdentity(Protocol):
    """Anything with platform, product name/version and a vendor identity."""

    @property
    def platform(self) -> str: ...

    @property
    def product_name(self) -> str: ...

    @property
    def product_version(self) -> str: ...

    @property
    def vendor(self) -> QualifiedIdentity: ...


@dataclass(frozen=True)
class QualifiedId:
    """Base shape for qualified identifiers (user, HPI-O, vendor).

    Attributes:
        id: Identifier value
        qualifier: Namespace prefix the identifier is qualified by
    """

    release: ClassVar[str] = ""

    id: str
    qualifier: str


@dataclass(frozen=True)
class Product:
    """Base shape for the software product identity.

    Attributes:
        platform: Platform the product runs on
        product_name: Product name as registered with the registry
        product_version: Product version
        vendor: Vendor qualified identity
    """

    release: ClassVar[str] = ""

    platform: str
    product_name: str
    product_version: str
    vendor: QualifiedId


@dataclass(frozen=True)
class Release3QualifiedId(QualifiedId):
    release: ClassVar[str] = "3.0"


@dataclass(frozen=True)
class Release3Product(Product):
    release: ClassVar[str] = "3.0"


@dataclass(frozen=True)
class Release302QualifiedId(QualifiedId):
    release: ClassVar[str] = "3.0.2"


@dataclass(frozen=True)
class Release302Product(Product):
    release: ClassVar[str] = "3.0.2"


@dataclass(frozen=True)
class Release32QualifiedId(QualifiedId):
    release: ClassVar[str] = "3.2"


@dataclass(frozen=True)
class Release32Product(Product):
    release: ClassVar[str] = "3.2"


@dataclass(frozen=True)
class Release40QualifiedId(QualifiedId):
    release: ClassVar[str] = "4.0"


@dataclass(frozen=True)
class Release40Product(Product):
    release: ClassVar[str] = "4.0"


@dataclass(frozen=True)
class Release50QualifiedId(QualifiedId):
    release: ClassVar[str] = "5.0"


@dataclass(frozen=True)
class Release50Product(Product):
    release: ClassVar[str] = "5.0"


@dataclass(frozen=True)
class IdentityTypes:
    """Pair of concrete identity types used by one schema release."""

    qualified_id: type[QualifiedId]
    product: type[Product]


RELEASE_3 = IdentityTypes(Release3QualifiedId, Release3Product)
RELEASE_302 = IdentityTypes(Release302QualifiedId, Release302Product)
RELEASE_32 = IdentityTypes(Release32QualifiedId, Release32Product)
RELEASE_40 = IdentityTypes(Release40QualifiedId, Release40Product)
RELEASE_50 = IdentityTypes(Release50QualifiedId, Release50Product)
