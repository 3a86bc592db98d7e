"""JSON persistence for the caller-owned token -> mapping index cache"""

import json
import os
from pathlib import Path
from typing import Union

from eth_utils import to_checksum_address

from .models import MappingSlotCache


def load_mapping_cache(path: Union[str, Path]) -> MappingSlotCache:
    """Load {token: index}; a missing file is an empty cache"""
    path = Path(path)
    if not path.exists():
        return {}
    with open(path) as f:
        data = json.load(f)
    return {to_checksum_address(token): int(index) for token, index in data.items()}


def save_mapping_cache(cache: MappingSlotCache, path: Union[str, Path]) -> None:
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    with open(tmp, "w") as f:
        json.dump(dict(sorted(cache.items())), f, indent=2)
    os.replace(tmp, path)
