import hashlib
import json
import logging
from typing import Dict, Iterator, List, Optional, Tuple

from sprayteach.constants import KEY_DECIMALS
from sprayteach.primitives import Drawing, Primitive

logger = logging.getLogger(__name__)


def _rounded(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        # -0.0 and 0.0 must hash alike
        return round(float(value), KEY_DECIMALS) + 0.0
    if isinstance(value, dict):
        return {k: _rounded(v) for k, v in value.items() if k != "layer"}
    if isinstance(value, (list, tuple)):
        return [_rounded(v) for v in value]
    return value


def content_key(primitive: Primitive) -> str:
    """Stable lookup key from the primitive's geometry.

    Two primitives get the same key when their geometry agrees after
    rounding to ``KEY_DECIMALS`` places; the layer is not part of the key.
    """
    payload = json.dumps(_rounded(primitive.to_json()), sort_keys=True)
    digest = hashlib.sha1(payload.encode("utf-8")).hexdigest()
    return f"{primitive.primitive_type}:{digest}"


class PrimitiveRegistry:
    """Owns the live primitives of one parsed drawing, in drawing order.

    Trajectories keep only the key; a key from an earlier session resolves
    again as long as the same geometry is present in the new drawing.
    """

    def __init__(self, primitives: Optional[List[Primitive]] = None):
        self._entries: List[Tuple[str, Primitive]] = []
        self._by_key: Dict[str, Primitive] = {}
        for primitive in primitives or []:
            self.register(primitive)

    @classmethod
    def from_drawing(cls, drawing: Drawing) -> "PrimitiveRegistry":
        return cls(list(drawing.entities))

    def register(self, primitive: Primitive) -> str:
        key = content_key(primitive)
        if key in self._by_key:
            logger.debug(f"Duplicate geometry for {key}, keeping first entity")
        else:
            self._by_key[key] = primitive
        self._entries.append((key, primitive))
        return key

    def resolve(self, key: Optional[str]) -> Optional[Primitive]:
        if key is None:
            return None
        return self._by_key.get(key)

    def key_for(self, primitive: Primitive) -> Optional[str]:
        for key, entry in self._entries:
            if entry is primitive:
                return key
        return None

    def items(self) -> Iterator[Tuple[str, Primitive]]:
        return iter(list(self._entries))

    def __contains__(self, key) -> bool:
        return key in self._by_key

    def __len__(self) -> int:
        return len(self._entries)
