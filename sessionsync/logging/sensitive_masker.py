"""
SessionSync: Logging - Sensitive Masker

Les données d'une session authentifiée contiennent des tokens et
parfois des mots de passe: elles passent par ce masker avant d'être loggées.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from .interfaces import DEFAULT_SENSITIVE_PATTERNS, ISensitiveMasker, MASK_VALUE


class SensitiveMasker(ISensitiveMasker):
    """
    Remplace par MASK_VALUE toute valeur dont la clé contient un
    fragment sensible, à n'importe quelle profondeur.

    Example:
        SensitiveMasker().mask({"access_token": "xyz", "user": "a"})
        # {"access_token": "***MASKED***", "user": "a"}
    """

    def __init__(self, additional_patterns: Optional[Iterable[str]] = None) -> None:
        self._patterns: List[str] = list(DEFAULT_SENSITIVE_PATTERNS)
        for pattern in additional_patterns or ():
            if pattern and pattern.strip():
                self.add_pattern(pattern)

    @property
    def patterns(self) -> List[str]:
        return list(self._patterns)

    def add_pattern(self, pattern: str) -> None:
        """
        Ajoute un fragment de clé sensible (insensible à la casse).

        Raises:
            ValueError: Fragment vide
        """
        normalized = (pattern or "").strip().lower()
        if not normalized:
            raise ValueError("Pattern cannot be empty")
        if normalized not in self._patterns:
            self._patterns.append(normalized)

    def is_sensitive_key(self, key: str) -> bool:
        lowered = key.lower() if key else ""
        return bool(lowered) and any(p in lowered for p in self._patterns)

    def mask(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Masque une copie de data.

        Les mappings imbriqués sont parcourus, les listes et tuples
        sont rendus sous forme de listes. Une valeur qui n'est pas
        un mapping est retournée telle quelle.
        """
        if not isinstance(data, Mapping):
            return data
        return {
            key: MASK_VALUE if self.is_sensitive_key(str(key)) else self._walk(value)
            for key, value in data.items()
        }

    def _walk(self, value: Any) -> Any:
        if isinstance(value, Mapping):
            return self.mask(value)
        if isinstance(value, (list, tuple)):
            return [self._walk(item) for item in value]
        return value
