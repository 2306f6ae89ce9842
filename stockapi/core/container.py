from dataclasses import dataclass

from ..application.services.credential_service import CredentialService
from ..application.services.product_service import ProductService
from ..application.services.token_service import TokenService
from .config import Settings
from ..domain.ports.persistence import PersistenceGateway


@dataclass(slots=True)
class ApplicationContainer:
    """Dependency registry shared across the FastAPI application lifecycle."""

    settings: Settings
    persistence: PersistenceGateway
    credential_service: CredentialService
    token_service: TokenService
    product_service: ProductService
