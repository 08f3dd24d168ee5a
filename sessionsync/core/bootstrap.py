"""
SessionSync: Bootstrap

Construction de la session applicative depuis sa configuration.
"""

from typing import Callable, Optional

from ..logging import LogConfig, SensitiveMasker, StructuredLogger
from ..session import CollaboratorRegistry, Session
from .interfaces import SessionConfig


def build_logger(
    config: SessionConfig,
    output_handler: Optional[Callable[[str], None]] = None,
) -> StructuredLogger:
    """Crée le logger de session selon la configuration."""
    return StructuredLogger(
        "sessionsync.session",
        config=LogConfig(
            min_level=config.min_level,
            mask_sensitive=config.mask_sensitive,
        ),
        masker=SensitiveMasker(additional_patterns=config.sensitive_patterns),
        output_handler=output_handler,
    )


def build_session(
    config: SessionConfig,
    registry: CollaboratorRegistry,
    output_handler: Optional[Callable[[str], None]] = None,
) -> Session:
    """
    Construit la session unique de l'application.

    Args:
        config: Configuration validée
        registry: Registre contenant le store configuré et les authenticators
        output_handler: Destination des lignes de log JSON

    Returns:
        Session abonnée au store configuré

    Raises:
        CollaboratorNotFoundError: Store configuré absent du registre
    """
    store = registry.lookup_store(config.store)
    return Session(
        store,
        registry,
        logger=build_logger(config, output_handler),
        authenticator_key=config.authenticator_key,
        log_content_values=config.log_content_values,
    )
