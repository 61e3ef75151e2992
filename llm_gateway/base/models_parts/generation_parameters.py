"""
Optional generation tunables supplied per request.

Unset fields (``None``) are never sent upstream, so provider defaults apply.
"""
from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Dict, Iterator, Optional, Tuple, Union

Number = Union[int, float]

# Validation order; the validator fails fast on the first violation in this order.
PARAMETER_ORDER: Tuple[str, ...] = (
    "temperature",
    "max_tokens",
    "top_p",
    "top_k",
    "frequency_penalty",
    "presence_penalty",
)


@dataclass(frozen=True)
class GenerationParameters:
    temperature: Optional[Number] = None
    max_tokens: Optional[int] = None
    top_p: Optional[Number] = None
    top_k: Optional[int] = None
    frequency_penalty: Optional[Number] = None
    presence_penalty: Optional[Number] = None

    def items_set(self) -> Iterator[Tuple[str, Number]]:
        """Yield ``(name, value)`` for every set field, in validation order."""
        for name in PARAMETER_ORDER:
            value = getattr(self, name)
            if value is not None:
                yield name, value

    def as_dict(self) -> Dict[str, Number]:
        return dict(self.items_set())

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))


__all__ = ["GenerationParameters", "PARAMETER_ORDER", "Number"]
