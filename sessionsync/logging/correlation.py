"""
SessionSync: Logging - Correlation

Corrélation des lignes de log d'une même opération de session
(authenticate, invalidate, restore, réconciliation) via ContextVar.
Les tâches asyncio héritent du contexte de leur créateur.
"""

import uuid
from contextlib import contextmanager
from typing import Iterator, Optional

from .interfaces import correlation_id_var


def new_correlation_id() -> str:
    """Génère un correlation_id unique (UUID v4)."""
    return str(uuid.uuid4())


def get_correlation_id() -> Optional[str]:
    """Retourne le correlation_id du contexte courant, ou None."""
    return correlation_id_var.get()


@contextmanager
def correlation_scope(correlation_id: Optional[str] = None) -> Iterator[str]:
    """
    Fixe un correlation_id pour la durée du bloc.

    Un scope imbriqué sans argument réutilise l'identifiant déjà actif,
    de sorte qu'une opération appelée depuis une autre reste corrélée.

    Args:
        correlation_id: ID imposé (sinon hérité ou généré)

    Yields:
        correlation_id actif dans le bloc
    """
    resolved = correlation_id or correlation_id_var.get() or new_correlation_id()
    token = correlation_id_var.set(resolved)
    try:
        yield resolved
    finally:
        correlation_id_var.reset(token)
