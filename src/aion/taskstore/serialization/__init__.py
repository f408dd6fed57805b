from .json_utils import from_json, model_to_json, to_json
from .parts import PartCodec, PartType

__all__ = [
    "PartCodec",
    "PartType",
    "to_json",
    "from_json",
    "model_to_json",
]
